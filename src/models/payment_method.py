"""Store payment method type definitions."""

from typing import TypedDict


class StorePaymentMethod(TypedDict):
    """Payment method configured by the store (payment_methods table)."""

    id: str
    name: str
    status: str
    is_default: bool
