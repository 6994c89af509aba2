"""Database model type definitions."""

from src.models.coupon import Coupon, CouponStatus, CouponType
from src.models.customer import Customer, CustomerRole
from src.models.order import (
    Address,
    FulfillmentStatus,
    OrderCreate,
    OrderItemCreate,
    PaymentMethod,
    PaymentStatus,
)
from src.models.product import CheckoutProduct
from src.models.transaction import TransactionCreate

__all__ = [
    "Address",
    "CheckoutProduct",
    "Coupon",
    "CouponStatus",
    "CouponType",
    "Customer",
    "CustomerRole",
    "FulfillmentStatus",
    "OrderCreate",
    "OrderItemCreate",
    "PaymentMethod",
    "PaymentStatus",
    "TransactionCreate",
]
