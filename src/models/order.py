"""Order model type definitions for database operations."""

from enum import Enum
from typing import TypedDict


class FulfillmentStatus(str, Enum):
    """Fulfillment status values matching the database enum."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PACKED = "PACKED"
    SHIPPED = "SHIPPED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"
    CANCELED = "CANCELED"


class PaymentStatus(str, Enum):
    """Payment status values matching the database enum."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """Payment methods a customer can choose at checkout."""

    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PAYPAL = "PAYPAL"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"


class Address(TypedDict, total=False):
    """Address snapshot stored as JSONB on the order.

    Copied at checkout so later edits to the customer's address book
    do not rewrite order history.
    """

    street: str
    address2: str
    city: str
    state: str
    country: str
    postal_code: str
    phone: str
    apartment: str
    is_default: bool


class OrderItemCreate(TypedDict):
    """Item payload passed to the atomic commit; order_id is stamped there."""

    product_id: str
    product_name: str
    product_sku: str | None
    product_image: str | None
    unit_price: str
    quantity: int
    total_price: str


class OrderCreate(TypedDict, total=False):
    """Order payload passed to the atomic commit.

    Money values are decimal strings so no precision is lost in JSON.
    """

    order_number: str
    customer_id: str
    subtotal: str
    tax_amount: str
    shipping_fee: str
    discount: str
    total_amount: str
    fulfillment_status: str
    payment_status: str
    payment_method: str
    coupon_id: str | None
    coupon_code: str | None
    shipping_address: Address
    billing_address: Address | None
    notes: str | None
    ip_address: str | None
    user_agent: str | None
    country: str | None
