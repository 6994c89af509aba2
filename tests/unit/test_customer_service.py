"""Unit tests for CustomerService."""

from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError as PostgrestAPIError

from src.api.middleware.error_handler import ValidationError
from src.schemas.checkout import CustomerInput
from src.services.customer_service import CustomerService


@pytest.fixture
def mock_supabase() -> MagicMock:
    """Create a mock Supabase client."""
    return MagicMock()


@pytest.fixture
def customer_service(mock_supabase: MagicMock) -> CustomerService:
    """Create CustomerService with a mocked client."""
    return CustomerService(mock_supabase)


@pytest.fixture
def guest() -> CustomerInput:
    """Guest contact details."""
    return CustomerInput(first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="+15550100")


def lookup_chain(mock_supabase: MagicMock) -> MagicMock:
    return mock_supabase.table.return_value.select.return_value.eq.return_value.maybe_single.return_value.execute


class TestResolveCustomerId:
    """Tests for resolve_customer_id."""

    @pytest.mark.asyncio
    async def test_trusts_supplied_customer_id(
        self, customer_service: CustomerService, mock_supabase: MagicMock, guest: CustomerInput
    ) -> None:
        """A supplied customer ID is used without any lookup."""
        result = await customer_service.resolve_customer_id("cust-1", guest)

        assert result == "cust-1"
        mock_supabase.table.assert_not_called()

    @pytest.mark.asyncio
    async def test_reuses_existing_customer_by_email(
        self, customer_service: CustomerService, mock_supabase: MagicMock, guest: CustomerInput
    ) -> None:
        """A repeat guest checkout reuses the existing row."""
        lookup_chain(mock_supabase).return_value = MagicMock(data={"id": "cust-existing", "email": guest.email})

        result = await customer_service.resolve_customer_id(None, guest)

        assert result == "cust-existing"
        mock_supabase.table.return_value.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_guest_when_email_unknown(
        self, customer_service: CustomerService, mock_supabase: MagicMock, guest: CustomerInput
    ) -> None:
        """A new email creates a guest customer."""
        lookup_chain(mock_supabase).return_value = None
        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "cust-new"}]
        )

        result = await customer_service.resolve_customer_id(None, guest)

        assert result == "cust-new"
        inserted = mock_supabase.table.return_value.insert.call_args[0][0]
        assert inserted["is_guest"] is True
        assert inserted["role"] == "GUEST"
        assert inserted["deleted_at"] is None
        assert "password" not in inserted

    @pytest.mark.asyncio
    async def test_concurrent_guest_creation_reuses_winner(
        self, customer_service: CustomerService, mock_supabase: MagicMock, guest: CustomerInput
    ) -> None:
        """Losing the insert race on the email falls back to the winner's row."""
        lookup_chain(mock_supabase).side_effect = [
            None,
            MagicMock(data={"id": "cust-winner"}),
        ]
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = PostgrestAPIError(
            {"message": "duplicate key value violates unique constraint \"customers_email_key\"", "code": "23505"}
        )

        result = await customer_service.resolve_customer_id(None, guest)

        assert result == "cust-winner"

    @pytest.mark.asyncio
    async def test_other_insert_errors_propagate(
        self, customer_service: CustomerService, mock_supabase: MagicMock, guest: CustomerInput
    ) -> None:
        """Non-uniqueness failures are not swallowed."""
        lookup_chain(mock_supabase).return_value = None
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = PostgrestAPIError(
            {"message": "permission denied", "code": "42501"}
        )

        with pytest.raises(PostgrestAPIError):
            await customer_service.resolve_customer_id(None, guest)

    @pytest.mark.asyncio
    async def test_requires_customer_information(self, customer_service: CustomerService) -> None:
        """Checkout cannot proceed anonymously."""
        with pytest.raises(ValidationError, match="Customer information is required"):
            await customer_service.resolve_customer_id(None, None)
