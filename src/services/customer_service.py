"""Customer resolution for checkout."""

import logging

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.api.middleware.error_handler import ValidationError
from src.models.customer import CUSTOMER_COLUMNS, Customer, CustomerRole, GuestCustomerCreate
from src.schemas.checkout import CustomerInput

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class CustomerService:
    """Maps a checkout request to the customer the order belongs to."""

    def __init__(self, client: Client) -> None:
        """Initialize customer service.

        Args:
            client: Supabase client.
        """
        self.client = client

    async def get_customer_by_email(self, email: str) -> Customer | None:
        """Get a customer (guest or registered) by email.

        Args:
            email: Email address.

        Returns:
            Customer | None: The customer or None if not found.
        """
        response = (
            self.client.table("customers")
            .select(CUSTOMER_COLUMNS)
            .eq("email", email)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def create_guest_customer(self, data: CustomerInput) -> Customer:
        """Insert a guest customer row.

        Args:
            data: Guest contact details.

        Returns:
            Customer: The created customer.

        Raises:
            postgrest.exceptions.APIError: If the insert fails, including a
                unique violation when the email was registered concurrently.
        """
        guest: GuestCustomerCreate = {
            "first_name": data.first_name,
            "last_name": data.last_name,
            "email": data.email,
            "phone": data.phone,
            "is_guest": True,
            "role": CustomerRole.GUEST.value,
            "deleted_at": None,
        }

        response = self.client.table("customers").insert(guest).execute()
        customer = response.data[0]
        logger.info("Created guest customer %s", customer["id"])
        return customer

    async def get_or_create_guest(self, data: CustomerInput) -> Customer:
        """Reuse the customer holding this email, or create a guest.

        Two checkouts racing on the same new email both end up with the
        single row that won the insert.

        Args:
            data: Guest contact details.

        Returns:
            Customer: Existing or newly created customer.
        """
        existing = await self.get_customer_by_email(data.email)
        if existing:
            return existing

        try:
            return await self.create_guest_customer(data)
        except PostgrestAPIError as e:
            if e.code != UNIQUE_VIOLATION:
                raise
            logger.info("Guest email %s created concurrently, reusing it", data.email)
            existing = await self.get_customer_by_email(data.email)
            if not existing:
                raise
            return existing

    async def resolve_customer_id(
        self,
        customer_id: str | None,
        guest: CustomerInput | None,
    ) -> str:
        """Decide which customer an order is placed for.

        A supplied customer_id is trusted as-is; ownership is checked
        before the request reaches checkout.

        Args:
            customer_id: Registered customer ID, if any.
            guest: Guest contact details, if any.

        Returns:
            str: Customer ID to attach to the order.

        Raises:
            ValidationError: If neither a customer ID nor guest details are given.
        """
        if customer_id:
            return customer_id

        if guest is None:
            raise ValidationError("Customer information is required for checkout")

        customer = await self.get_or_create_guest(guest)
        return customer["id"]
