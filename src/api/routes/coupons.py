"""Storefront coupon routes."""

from fastapi import APIRouter

from src.api.deps import CouponServiceDep
from src.schemas.checkout import CouponValidateRequest, CouponValidateResponse
from src.services.pricing import round_money

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post(
    "/validate",
    response_model=CouponValidateResponse,
    summary="Preview a coupon",
    description="Checks a coupon code against a cart subtotal without consuming a use.",
)
async def validate_coupon(
    data: CouponValidateRequest,
    service: CouponServiceDep,
) -> CouponValidateResponse:
    """Validate a coupon code and return the discount it would grant.

    Figures are rounded to cents the same way checkout rounds the order.

    Raises:
        NotFoundError: 404 if the code does not exist.
        ValidationError: 422 if the coupon cannot be used now.
    """
    result = await service.validate_and_apply_coupon(
        data.coupon_code,
        data.subtotal,
        data.shipping_fee,
    )

    discount = round_money(result.discount_amount)
    final_total = round_money(data.subtotal) + round_money(data.shipping_fee) - discount

    return CouponValidateResponse(
        coupon_code=result.code,
        coupon_name=result.coupon.get("name"),
        coupon_type=result.coupon["type"],
        discount_amount=discount,
        final_total=final_total,
    )
