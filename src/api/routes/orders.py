"""Storefront checkout routes."""

import logging

from fastapi import APIRouter, status

from src.api.deps import ClientMetadata, OrderServiceDep
from src.schemas.checkout import CheckoutRequest, CheckoutResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    description=(
        "Prices the cart from the catalog, applies an optional coupon, and commits the "
        "order, its items, the stock decrement and the payment transaction atomically."
    ),
    responses={
        404: {"description": "Unknown product or coupon"},
        409: {"description": "Order number collision persisted after retries"},
        422: {"description": "Insufficient stock, invalid coupon or missing customer details"},
    },
)
async def create_order(
    data: CheckoutRequest,
    service: OrderServiceDep,
    metadata: ClientMetadata,
) -> CheckoutResponse:
    """Create an order from a cart.

    Client IP, user agent and country observed on the request take
    precedence over values sent in the body.

    Args:
        data: Checkout request.
        service: Checkout orchestrator.
        metadata: Client details extracted from the request.

    Returns:
        CheckoutResponse: ID, number and total of the new order.
    """
    data = data.model_copy(
        update={
            "ip_address": metadata.ip_address or data.ip_address,
            "user_agent": metadata.user_agent or data.user_agent,
            "country": metadata.country or data.country,
        }
    )

    result = await service.create_order(data)
    logger.info("Order %s placed, total %s", result.order_number, result.total_amount)

    return CheckoutResponse(
        order_id=result.order_id,
        order_number=result.order_number,
        total_amount=result.total_amount,
    )
