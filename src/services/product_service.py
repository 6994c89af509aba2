"""Product reads used by checkout."""

import logging
from collections.abc import Iterable

from supabase import Client

from src.models.product import CHECKOUT_PRODUCT_COLUMNS, CheckoutProduct

logger = logging.getLogger(__name__)


class ProductService:
    """Service for catalog lookups during checkout."""

    def __init__(self, client: Client) -> None:
        """Initialize product service.

        Args:
            client: Supabase client.
        """
        self.client = client

    async def get_products_by_ids(self, product_ids: Iterable[str]) -> dict[str, CheckoutProduct]:
        """Fetch live, non-deleted products by ID.

        Args:
            product_ids: Product IDs referenced by the cart.

        Returns:
            dict[str, CheckoutProduct]: Products keyed by ID. IDs that do not
            exist, or are soft-deleted, are absent.
        """
        ids = list(dict.fromkeys(str(pid) for pid in product_ids))
        if not ids:
            return {}

        response = (
            self.client.table("products")
            .select(CHECKOUT_PRODUCT_COLUMNS)
            .in_("id", ids)
            .is_("deleted_at", "null")
            .execute()
        )

        return {product["id"]: product for product in response.data or []}
