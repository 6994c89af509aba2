"""Coupon model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class CouponType(str, Enum):
    """How a coupon's value turns into a discount."""

    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"
    FREE_SHIPPING = "FREE_SHIPPING"
    PRICE_DISCOUNT = "PRICE_DISCOUNT"


class CouponStatus(str, Enum):
    """Coupon status values matching the database enum."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"


class Coupon(TypedDict):
    """Coupon table row."""

    id: str
    code: str
    name: str
    type: str
    value: float
    status: str
    start_date: str | datetime
    end_date: str | datetime | None
    usage_limit: int | None
    usage_count: int
