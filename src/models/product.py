"""Product model type definitions for database operations."""

from typing import TypedDict


class CheckoutProduct(TypedDict):
    """Projection of a products row read during checkout.

    price arrives from PostgREST as a JSON number; callers convert it
    to Decimal before doing arithmetic.
    """

    id: str
    name: str
    price: float | str
    images: list[str] | None
    sku: str | None
    stock_quantity: int | None
    is_unlimited_stock: bool


CHECKOUT_PRODUCT_COLUMNS = "id, name, price, images, sku, stock_quantity, is_unlimited_stock"
