"""FastAPI dependency injection functions.

This module is the composition root: it builds the Supabase client once
and hands it explicitly to every service.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from supabase import Client

from src.core.config import Settings, get_settings
from src.core.supabase import get_supabase_client
from src.services.coupon_service import CouponService
from src.services.customer_service import CustomerService
from src.services.order_committer import OrderCommitter
from src.services.order_service import OrderService
from src.services.order_stats_worker import OrderStatsWorker
from src.services.payment_method_service import PaymentMethodService
from src.services.product_service import ProductService

COUNTRY_HEADERS = ("cf-ipcountry", "x-country-code")


def get_db() -> Client:
    """Get the database client shared by the request's services."""
    return get_supabase_client()


DBClient = Annotated[Client, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_coupon_service(client: DBClient) -> CouponService:
    """Build the coupon service."""
    return CouponService(client)


def get_order_stats_worker(request: Request) -> OrderStatsWorker | None:
    """Get the worker started by the app lifespan, or None outside it."""
    return getattr(request.app.state, "order_stats_worker", None)


StatsWorker = Annotated[OrderStatsWorker | None, Depends(get_order_stats_worker)]


def get_order_service(client: DBClient, settings: AppSettings, stats_worker: StatsWorker) -> OrderService:
    """Build the checkout orchestrator and its collaborators."""
    return OrderService(
        products=ProductService(client),
        coupons=CouponService(client),
        customers=CustomerService(client),
        payment_methods=PaymentMethodService(client),
        committer=OrderCommitter(client),
        stats_worker=stats_worker,
        settings=settings,
    )


@dataclass
class RequestMetadata:
    """Client details recorded on the order."""

    ip_address: str | None = None
    user_agent: str | None = None
    country: str | None = None


def get_request_metadata(request: Request) -> RequestMetadata:
    """Extract client IP, user agent and country from the request.

    The first X-Forwarded-For hop wins over the socket peer, since the
    service runs behind a proxy. Country comes from the CDN geo header
    when one is present.

    Args:
        request: FastAPI request object.

    Returns:
        RequestMetadata: Extracted values; missing ones are None.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip() or None
    else:
        ip_address = request.client.host if request.client else None

    country = None
    for header in COUNTRY_HEADERS:
        value = request.headers.get(header)
        if value:
            country = value.strip().upper()
            break

    return RequestMetadata(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent") or None,
        country=country,
    )


CouponServiceDep = Annotated[CouponService, Depends(get_coupon_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
ClientMetadata = Annotated[RequestMetadata, Depends(get_request_metadata)]
