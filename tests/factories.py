"""Row and request builders shared by the test suite."""

from typing import Any


def make_product(
    product_id: str = "550e8400-e29b-41d4-a716-446655440000",
    name: str = "Canvas Tote",
    price: float | str = 10.0,
    stock_quantity: int | None = 10,
    is_unlimited_stock: bool = False,
    sku: str | None = "TOTE-001",
    images: list[str] | None = None,
) -> dict[str, Any]:
    """Build a products row as PostgREST returns it."""
    return {
        "id": product_id,
        "name": name,
        "price": price,
        "images": images if images is not None else ["https://cdn.example.com/tote.jpg"],
        "sku": sku,
        "stock_quantity": stock_quantity,
        "is_unlimited_stock": is_unlimited_stock,
    }


def make_coupon(**overrides: Any) -> dict[str, Any]:
    """Build a coupons row as PostgREST returns it."""
    coupon = {
        "id": "880e8400-e29b-41d4-a716-446655440000",
        "code": "HALF",
        "name": "Half off",
        "type": "PERCENTAGE",
        "value": 50,
        "status": "ACTIVE",
        "start_date": "2024-01-01T00:00:00+00:00",
        "end_date": None,
        "usage_limit": 100,
        "usage_count": 3,
    }
    coupon.update(overrides)
    return coupon


def checkout_payload(**overrides: Any) -> dict[str, Any]:
    """Build a checkout request body."""
    payload: dict[str, Any] = {
        "customer": {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "phone": "+15550100",
        },
        "items": [{"product_id": "550e8400-e29b-41d4-a716-446655440000", "quantity": 2}],
        "shipping_address": {
            "street": "1 Analytical Way",
            "city": "London",
            "country": "GB",
            "postal_code": "N1 9GU",
        },
        "payment_method": "CREDIT_CARD",
        "shipping_fee": 5,
    }
    payload.update(overrides)
    return payload
