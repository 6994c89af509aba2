"""Transaction model type definitions for database operations."""

from typing import TypedDict


class TransactionCreate(TypedDict, total=False):
    """Transaction payload passed to the atomic commit; order_id is stamped there."""

    transaction_number: str
    customer_id: str
    amount: str
    currency: str
    payment_method: str
    payment_status: str
    payment_gateway: str
    gateway_transaction_id: str | None
    store_payment_method_id: str | None
