"""Coupon lookup and discount evaluation."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from supabase import Client

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.models.coupon import Coupon, CouponStatus, CouponType
from src.services.pricing import HUNDRED, ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouponValidationResult:
    """A coupon that passed validation and the discount it grants."""

    coupon: Coupon
    discount_amount: Decimal

    @property
    def coupon_id(self) -> str:
        return self.coupon["id"]

    @property
    def code(self) -> str:
        return self.coupon["code"]


def _parse_timestamp(value: str | datetime) -> datetime:
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CouponService:
    """Validates coupon codes and computes their discount.

    Evaluation never touches usage_count; usage is consumed by the
    atomic order commit only.
    """

    def __init__(self, client: Client) -> None:
        """Initialize coupon service.

        Args:
            client: Supabase client.
        """
        self.client = client

    async def get_coupon_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by its code.

        Args:
            code: Coupon code as typed by the customer.

        Returns:
            Coupon | None: The coupon row or None if not found.
        """
        response = (
            self.client.table("coupons")
            .select("*")
            .eq("code", code)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def validate_and_apply_coupon(
        self,
        coupon_code: str,
        subtotal: Decimal,
        shipping_fee: Decimal,
        now: datetime | None = None,
    ) -> CouponValidationResult:
        """Validate a coupon and compute its discount for a cart.

        Checks run in order and the first failure wins: status, start
        date, end date, usage limit.

        Args:
            coupon_code: Code to evaluate.
            subtotal: Cart subtotal from catalog prices.
            shipping_fee: Shipping charged on the order.
            now: Evaluation time, defaults to the current UTC time.

        Returns:
            CouponValidationResult: The coupon and a non-negative discount.

        Raises:
            NotFoundError: If no coupon has this code.
            ValidationError: If the coupon is inactive, outside its validity
                window, exhausted, or of an unsupported type.
        """
        coupon = await self.get_coupon_by_code(coupon_code)
        if not coupon:
            raise NotFoundError(f"No coupon found with code: {coupon_code}")

        self._check_usable(coupon, now or datetime.now(timezone.utc))
        discount = self.calculate_discount(coupon, subtotal, shipping_fee)

        return CouponValidationResult(coupon=coupon, discount_amount=discount)

    def _check_usable(self, coupon: Coupon, now: datetime) -> None:
        code = coupon["code"]

        if coupon["status"] != CouponStatus.ACTIVE.value:
            raise ValidationError(f"Coupon '{code}' is not active")

        start_date = _parse_timestamp(coupon["start_date"])
        if start_date > now:
            raise ValidationError(
                f"Coupon '{code}' is not yet valid. Valid from {start_date.date().isoformat()}"
            )

        if coupon.get("end_date"):
            end_date = _parse_timestamp(coupon["end_date"])
            if end_date < now:
                raise ValidationError(f"Coupon '{code}' has expired on {end_date.date().isoformat()}")

        usage_limit = coupon.get("usage_limit")
        if usage_limit is not None and (coupon.get("usage_count") or 0) >= usage_limit:
            raise ValidationError(f"Coupon '{code}' has reached its usage limit")

    @staticmethod
    def calculate_discount(coupon: Coupon, subtotal: Decimal, shipping_fee: Decimal) -> Decimal:
        """Compute the discount a coupon grants.

        Amount and percentage discounts are capped at the subtotal; free
        shipping is worth the shipping fee. The result is never negative.

        Raises:
            ValidationError: If the coupon type is not recognised.
        """
        try:
            coupon_type = CouponType(coupon["type"])
        except ValueError:
            raise ValidationError(f"Unsupported coupon type: {coupon['type']}") from None

        value = to_decimal(coupon["value"])

        if coupon_type in (CouponType.FIXED, CouponType.PRICE_DISCOUNT):
            discount = min(value, subtotal)
        elif coupon_type is CouponType.PERCENTAGE:
            discount = min(subtotal * value / HUNDRED, subtotal)
        elif coupon_type is CouponType.FREE_SHIPPING:
            discount = shipping_fee
        else:
            raise ValidationError(f"Unsupported coupon type: {coupon_type.value}")

        return max(ZERO, discount)
