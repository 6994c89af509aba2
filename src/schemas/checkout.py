"""Checkout and coupon Pydantic schemas for API request/response models."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, model_validator

from src.models.coupon import CouponType
from src.models.order import PaymentMethod

# Money leaves the API as a JSON number, not a string
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CustomerInput(BaseModel):
    """Guest contact details supplied when no customer_id is given."""

    first_name: str = Field(min_length=1, description="First name")
    last_name: str = Field(min_length=1, description="Last name")
    email: EmailStr = Field(description="Email, used to reuse an existing customer")
    phone: str = Field(min_length=6, description="Phone number")


class AddressSchema(BaseModel):
    """Shipping or billing address. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    street: str = Field(min_length=1)
    address2: str | None = None
    city: str = Field(min_length=1)
    state: str | None = None
    country: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    phone: str | None = None
    apartment: str | None = None
    is_default: bool | None = None


class OrderItemInput(BaseModel):
    """A cart line. Prices, names and images are never accepted from the client."""

    model_config = ConfigDict(extra="forbid")

    product_id: UUID = Field(description="Product UUID")
    quantity: int = Field(ge=1, description="Quantity ordered")


class CheckoutRequest(BaseModel):
    """Schema for POST /orders."""

    customer_id: UUID | None = Field(default=None, description="Registered customer ID")
    customer: CustomerInput | None = Field(default=None, description="Guest contact info")

    items: list[OrderItemInput] = Field(min_length=1, description="Cart lines")

    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None

    payment_method: PaymentMethod

    shipping_fee: Decimal | None = Field(default=None, ge=0)
    discount: Decimal | None = Field(default=None, ge=0)
    coupon_code: str | None = Field(default=None, min_length=1)

    notes: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    country: str | None = None

    @model_validator(mode="after")
    def merge_duplicate_items(self) -> "CheckoutRequest":
        """Collapse repeated product lines into one line per product."""
        quantities: dict[UUID, int] = {}
        for item in self.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
        if len(quantities) != len(self.items):
            self.items = [
                OrderItemInput(product_id=product_id, quantity=quantity)
                for product_id, quantity in quantities.items()
            ]
        return self


class CheckoutResponse(BaseModel):
    """Schema for a successful checkout."""

    order_id: UUID = Field(description="Created order UUID")
    order_number: str = Field(description="Human-readable order number")
    total_amount: Money = Field(description="Charged total")


class CouponValidateRequest(BaseModel):
    """Schema for POST /coupons/validate."""

    coupon_code: str = Field(min_length=1, description="Coupon code is required")
    subtotal: Decimal = Field(gt=0, description="Cart subtotal")
    shipping_fee: Decimal = Field(default=Decimal("0"), ge=0, description="Shipping fee")


class CouponValidateResponse(BaseModel):
    """Result of a coupon preview."""

    valid: bool = True
    coupon_code: str
    coupon_name: str | None = None
    coupon_type: CouponType
    discount_amount: Money
    final_total: Money
