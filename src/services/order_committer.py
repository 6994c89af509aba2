"""Atomic order commit.

The whole write set of a checkout (order, items, stock decrements,
transaction, coupon usage, stats outbox event) is persisted by the
``commit_order`` database function inside a single PostgreSQL
transaction. Stock and coupon usage are changed with guarded updates
(``... WHERE stock_quantity >= quantity``), so two checkouts racing for
the last unit cannot both succeed. Any error raised by the function rolls
back every write it made.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.api.middleware.error_handler import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    OrderCommitError,
    ValidationError,
)
from src.models.order import OrderCreate, OrderItemCreate
from src.models.transaction import TransactionCreate

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
INSUFFICIENT_STOCK = "SC001"
PRODUCT_NOT_FOUND = "SC002"
COUPON_EXHAUSTED = "SC003"

# Unique constraints that a freshly generated number can trip
NUMBER_CONSTRAINTS = ("order_number", "transaction_number")


@dataclass(frozen=True)
class CommittedOrder:
    """Identifiers returned by a successful commit."""

    order_id: str
    order_number: str
    total_amount: Decimal
    transaction_id: str
    stats_event_id: str | None


def _error_detail(error: PostgrestAPIError) -> dict[str, Any]:
    if not error.details:
        return {}
    try:
        detail = json.loads(error.details)
    except (TypeError, ValueError):
        return {}
    return detail if isinstance(detail, dict) else {}


class OrderCommitter:
    """Persists a priced checkout in one all-or-nothing database call."""

    def __init__(self, client: Client) -> None:
        """Initialize the committer.

        Args:
            client: Supabase client.
        """
        self.client = client

    async def commit(
        self,
        order: OrderCreate,
        items: list[OrderItemCreate],
        transaction: TransactionCreate,
        coupon_id: str | None = None,
        product_names: dict[str, str] | None = None,
    ) -> CommittedOrder:
        """Create the order, its items and transaction, and take the stock.

        Args:
            order: Finalized order row.
            items: Order item snapshots; order_id is stamped in the database.
            transaction: Transaction row; order_id is stamped in the database.
            coupon_id: Coupon whose usage is consumed by this order.
            product_names: Product names keyed by ID, used in error messages.

        Returns:
            CommittedOrder: IDs of the persisted order and its side records.

        Raises:
            InsufficientStockError: A product no longer has enough stock.
            NotFoundError: A product disappeared before the commit.
            ValidationError: The coupon hit its usage limit meanwhile.
            ConflictError: The order or transaction number already exists.
            OrderCommitError: Any other database failure.
        """
        params = {
            "p_order": order,
            "p_items": items,
            "p_transaction": transaction,
            "p_coupon_id": coupon_id,
        }

        try:
            response = self.client.rpc("commit_order", params).execute()
        except PostgrestAPIError as e:
            raise self._translate_error(e, product_names or {}) from e

        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise OrderCommitError("Order commit returned no result")

        committed = CommittedOrder(
            order_id=str(data["order_id"]),
            order_number=data["order_number"],
            total_amount=Decimal(str(data["total_amount"])),
            transaction_id=str(data["transaction_id"]),
            stats_event_id=str(data["stats_event_id"]) if data.get("stats_event_id") else None,
        )
        logger.info(
            "Committed order %s (%s) with %d item(s)",
            committed.order_number,
            committed.order_id,
            len(items),
        )
        return committed

    @staticmethod
    def _translate_error(error: PostgrestAPIError, product_names: dict[str, str]) -> Exception:
        code = error.code
        detail = _error_detail(error)

        if code == INSUFFICIENT_STOCK:
            product_id = str(detail.get("product_id", ""))
            return InsufficientStockError(
                product_id=product_id,
                product_name=product_names.get(product_id),
                available=detail.get("available"),
                requested=detail.get("requested"),
            )

        if code == PRODUCT_NOT_FOUND:
            return NotFoundError(f"Product not found: {detail.get('product_id', 'unknown')}")

        if code == COUPON_EXHAUSTED:
            return ValidationError(error.message or "Coupon has reached its usage limit")

        if code == UNIQUE_VIOLATION:
            text = f"{error.message or ''} {error.details or ''}"
            if any(name in text for name in NUMBER_CONSTRAINTS):
                return ConflictError("Generated order number already exists")

        logger.error("Order commit failed: %s (code=%s)", error.message, code)
        return OrderCommitError()
