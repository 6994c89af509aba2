"""Checkout orchestration: cart in, committed order out."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.api.middleware.error_handler import ConflictError, InsufficientStockError, NotFoundError
from src.core.config import Settings
from src.models.order import (
    FulfillmentStatus,
    OrderCreate,
    OrderItemCreate,
    PaymentMethod,
    PaymentStatus,
)
from src.models.product import CheckoutProduct
from src.models.transaction import TransactionCreate
from src.schemas.checkout import CheckoutRequest
from src.services.coupon_service import CouponService, CouponValidationResult
from src.services.customer_service import CustomerService
from src.services.order_committer import CommittedOrder, OrderCommitter
from src.services.order_numbers import generate_order_number, generate_transaction_number
from src.services.order_stats_worker import OrderStatsWorker
from src.services.payment_method_service import PaymentMethodService
from src.services.pricing import ZERO, PricingBreakdown, calculate_order_pricing, calculate_subtotal, to_decimal
from src.services.product_service import ProductService

logger = logging.getLogger(__name__)

# No gateway is integrated: card-like payments settle immediately,
# pay-on-delivery stays pending until fulfilment.
INITIAL_PAYMENT_STATUS: dict[PaymentMethod, PaymentStatus] = {
    PaymentMethod.CREDIT_CARD: PaymentStatus.COMPLETED,
    PaymentMethod.DEBIT_CARD: PaymentStatus.COMPLETED,
    PaymentMethod.PAYPAL: PaymentStatus.COMPLETED,
    PaymentMethod.BANK_TRANSFER: PaymentStatus.COMPLETED,
    PaymentMethod.CASH_ON_DELIVERY: PaymentStatus.PENDING,
}


def initial_payment_status(method: PaymentMethod) -> PaymentStatus:
    """Payment status a new order starts with for the given method.

    Raises:
        ValueError: If the method has no mapping.
    """
    try:
        return INITIAL_PAYMENT_STATUS[method]
    except KeyError:
        raise ValueError(f"No initial payment status for payment method {method!r}") from None


@dataclass(frozen=True)
class ServerOrderItem:
    """A cart line priced from the catalog, never from the request."""

    product_id: str
    product_name: str
    product_sku: str | None
    product_image: str | None
    unit_price: Decimal
    quantity: int

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_record(self) -> OrderItemCreate:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "product_image": self.product_image,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "total_price": str(self.total_price),
        }


@dataclass(frozen=True)
class OrderCreationResult:
    """What the caller gets back from a successful checkout."""

    order_id: str
    order_number: str
    total_amount: Decimal


class OrderService:
    """Turns a validated checkout request into a committed order.

    Steps: load catalog products, advisory stock check, server-side
    pricing, coupon evaluation, customer resolution, atomic commit, and
    finally handing the stats event to the background worker.
    """

    def __init__(
        self,
        products: ProductService,
        coupons: CouponService,
        customers: CustomerService,
        payment_methods: PaymentMethodService,
        committer: OrderCommitter,
        stats_worker: OrderStatsWorker | None,
        settings: Settings,
    ) -> None:
        self.products = products
        self.coupons = coupons
        self.customers = customers
        self.payment_methods = payment_methods
        self.committer = committer
        self.stats_worker = stats_worker
        self.settings = settings

    async def create_order(self, request: CheckoutRequest) -> OrderCreationResult:
        """Run the checkout pipeline.

        Args:
            request: Schema-validated checkout request.

        Returns:
            OrderCreationResult: ID, number and total of the new order.

        Raises:
            NotFoundError: A product or the coupon does not exist.
            ValidationError: Insufficient stock, missing customer details,
                or an unusable coupon.
            ConflictError: Order numbers kept colliding.
            OrderCommitError: The database rejected the commit.
        """
        server_items = await self._build_server_items(request)

        subtotal = calculate_subtotal(server_items)
        shipping_fee = request.shipping_fee or ZERO

        applied_coupon: CouponValidationResult | None = None
        # A manual discount can never exceed what is being bought
        discount_amount = min(request.discount or ZERO, subtotal)
        if request.coupon_code:
            applied_coupon = await self.coupons.validate_and_apply_coupon(
                request.coupon_code, subtotal, shipping_fee
            )
            discount_amount = applied_coupon.discount_amount

        pricing = calculate_order_pricing(
            server_items,
            shipping_fee=shipping_fee,
            tax_rate=self.settings.default_tax_rate,
            discount_amount=discount_amount,
        )

        customer_id = await self.customers.resolve_customer_id(
            str(request.customer_id) if request.customer_id else None,
            request.customer,
        )

        payment_status = initial_payment_status(request.payment_method)
        store_method = await self.payment_methods.get_active_payment_method()

        committed = await self._commit_with_fresh_numbers(
            request=request,
            server_items=server_items,
            pricing=pricing,
            customer_id=customer_id,
            payment_status=payment_status,
            store_payment_method_id=store_method["id"] if store_method else None,
            applied_coupon=applied_coupon,
        )

        if self.stats_worker and committed.stats_event_id:
            self.stats_worker.schedule(committed.stats_event_id)

        return OrderCreationResult(
            order_id=committed.order_id,
            order_number=committed.order_number,
            total_amount=committed.total_amount,
        )

    async def _build_server_items(self, request: CheckoutRequest) -> list[ServerOrderItem]:
        product_ids = [str(item.product_id) for item in request.items]
        products = await self.products.get_products_by_ids(product_ids)

        server_items = []
        for item in request.items:
            product_id = str(item.product_id)
            product = products.get(product_id)
            if product is None:
                raise NotFoundError(f"Product not found: {product_id}")

            # Advisory only; the commit re-checks under lock
            self._check_stock(product, item.quantity)

            images = product.get("images") or []
            server_items.append(
                ServerOrderItem(
                    product_id=product_id,
                    product_name=product["name"],
                    product_sku=product.get("sku"),
                    product_image=images[0] if images else None,
                    unit_price=to_decimal(product["price"]),
                    quantity=item.quantity,
                )
            )
        return server_items

    @staticmethod
    def _check_stock(product: CheckoutProduct, quantity: int) -> None:
        if product.get("is_unlimited_stock"):
            return
        available = product.get("stock_quantity") or 0
        if available < quantity:
            raise InsufficientStockError(
                product_id=product["id"],
                product_name=product["name"],
                available=available,
                requested=quantity,
            )

    async def _commit_with_fresh_numbers(
        self,
        request: CheckoutRequest,
        server_items: list[ServerOrderItem],
        pricing: PricingBreakdown,
        customer_id: str,
        payment_status: PaymentStatus,
        store_payment_method_id: str | None,
        applied_coupon: CouponValidationResult | None,
    ) -> CommittedOrder:
        # Rows are locked in product_id order so overlapping carts cannot deadlock
        items = [item.to_record() for item in sorted(server_items, key=lambda item: item.product_id)]
        product_names = {item.product_id: item.product_name for item in server_items}
        max_attempts = self.settings.order_number_max_attempts

        for attempt in range(1, max_attempts + 1):
            order = self._build_order(request, pricing, customer_id, payment_status, applied_coupon)
            transaction = self._build_transaction(
                request, pricing, customer_id, payment_status, store_payment_method_id
            )
            try:
                return await self.committer.commit(
                    order,
                    items,
                    transaction,
                    coupon_id=applied_coupon.coupon_id if applied_coupon else None,
                    product_names=product_names,
                )
            except ConflictError:
                if attempt == max_attempts:
                    raise
                logger.warning(
                    "Order number collision on attempt %d/%d, retrying",
                    attempt,
                    max_attempts,
                )

        raise ConflictError("Could not allocate a unique order number")

    @staticmethod
    def _build_order(
        request: CheckoutRequest,
        pricing: PricingBreakdown,
        customer_id: str,
        payment_status: PaymentStatus,
        applied_coupon: CouponValidationResult | None,
    ) -> OrderCreate:
        return {
            "order_number": generate_order_number(),
            "customer_id": customer_id,
            "subtotal": str(pricing.subtotal),
            "tax_amount": str(pricing.tax_amount),
            "shipping_fee": str(pricing.shipping_fee),
            "discount": str(pricing.discount),
            "total_amount": str(pricing.total_amount),
            "fulfillment_status": FulfillmentStatus.PENDING.value,
            "payment_status": payment_status.value,
            "payment_method": request.payment_method.value,
            "coupon_id": applied_coupon.coupon_id if applied_coupon else None,
            "coupon_code": applied_coupon.code if applied_coupon else None,
            "shipping_address": request.shipping_address.model_dump(exclude_none=True),
            "billing_address": (
                request.billing_address.model_dump(exclude_none=True) if request.billing_address else None
            ),
            "notes": request.notes,
            "ip_address": request.ip_address,
            "user_agent": request.user_agent,
            "country": request.country,
        }

    def _build_transaction(
        self,
        request: CheckoutRequest,
        pricing: PricingBreakdown,
        customer_id: str,
        payment_status: PaymentStatus,
        store_payment_method_id: str | None,
    ) -> TransactionCreate:
        return {
            "transaction_number": generate_transaction_number(),
            "customer_id": customer_id,
            "amount": str(pricing.total_amount),
            "currency": self.settings.currency,
            "payment_method": request.payment_method.value,
            "payment_status": payment_status.value,
            "payment_gateway": self.settings.payment_gateway,
            "gateway_transaction_id": None,
            "store_payment_method_id": store_payment_method_id,
        }
