"""Unit tests for PaymentMethodService."""

from unittest.mock import MagicMock

import pytest

from src.services.payment_method_service import PaymentMethodService


@pytest.fixture
def mock_supabase() -> MagicMock:
    """Create a mock Supabase client."""
    return MagicMock()


@pytest.fixture
def payment_method_service(mock_supabase: MagicMock) -> PaymentMethodService:
    """Create PaymentMethodService with a mocked client."""
    return PaymentMethodService(mock_supabase)


def stub_methods(mock_supabase: MagicMock, methods: list[dict]) -> None:
    mock_supabase.table.return_value.select.return_value.order.return_value.execute.return_value = MagicMock(
        data=methods
    )


class TestGetActivePaymentMethod:
    """Tests for get_active_payment_method."""

    @pytest.mark.asyncio
    async def test_prefers_active_default(
        self, payment_method_service: PaymentMethodService, mock_supabase: MagicMock
    ) -> None:
        stub_methods(
            mock_supabase,
            [
                {"id": "pm-1", "name": "Bank", "status": "ACTIVE", "is_default": False},
                {"id": "pm-2", "name": "Old default", "status": "INACTIVE", "is_default": True},
                {"id": "pm-3", "name": "Card", "status": "ACTIVE", "is_default": True},
            ],
        )

        method = await payment_method_service.get_active_payment_method()

        assert method["id"] == "pm-3"
        mock_supabase.table.assert_called_with("payment_methods")

    @pytest.mark.asyncio
    async def test_falls_back_to_first(
        self, payment_method_service: PaymentMethodService, mock_supabase: MagicMock
    ) -> None:
        stub_methods(
            mock_supabase,
            [
                {"id": "pm-1", "name": "Bank", "status": "ACTIVE", "is_default": False},
                {"id": "pm-2", "name": "Card", "status": "INACTIVE", "is_default": False},
            ],
        )

        method = await payment_method_service.get_active_payment_method()

        assert method["id"] == "pm-1"

    @pytest.mark.asyncio
    async def test_none_configured(
        self, payment_method_service: PaymentMethodService, mock_supabase: MagicMock
    ) -> None:
        stub_methods(mock_supabase, [])

        assert await payment_method_service.get_active_payment_method() is None
