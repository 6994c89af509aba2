"""Store payment method selection."""

from supabase import Client

from src.models.payment_method import StorePaymentMethod


class PaymentMethodService:
    """Reads the payment methods configured for the store."""

    def __init__(self, client: Client) -> None:
        self.client = client

    async def get_all_payment_methods(self) -> list[StorePaymentMethod]:
        """List every configured store payment method, oldest first."""
        response = (
            self.client.table("payment_methods")
            .select("id, name, status, is_default")
            .order("created_at")
            .execute()
        )

        return response.data or []

    async def get_active_payment_method(self) -> StorePaymentMethod | None:
        """Pick the method recorded on new transactions.

        The default ACTIVE method wins; otherwise the first configured one.
        """
        methods = await self.get_all_payment_methods()
        for method in methods:
            if method.get("is_default") and method.get("status") == "ACTIVE":
                return method
        return methods[0] if methods else None
