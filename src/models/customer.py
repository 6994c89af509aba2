"""Customer model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class CustomerRole(str, Enum):
    """Customer role values matching the database enum."""

    GUEST = "GUEST"
    CUSTOMER = "CUSTOMER"
    VIP = "VIP"


class Customer(TypedDict):
    """Customer table row, without the password hash."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    is_guest: bool
    role: CustomerRole
    total_orders: int
    total_spent: float
    last_order_date: datetime | None
    deleted_at: datetime | None


class GuestCustomerCreate(TypedDict):
    """Data inserted when checkout creates a guest customer."""

    first_name: str
    last_name: str
    email: str
    phone: str
    is_guest: bool
    role: str
    deleted_at: None


CUSTOMER_COLUMNS = "id, first_name, last_name, email, phone, is_guest, role"
