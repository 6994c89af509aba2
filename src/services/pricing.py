"""Order pricing calculation.

Intermediate arithmetic runs on unrounded Decimals; each figure is rounded
to cents once, on the way out, and the total is the sum of those figures.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricedLine(Protocol):
    """Anything carrying a trusted unit price and a quantity."""

    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PricingBreakdown:
    """Rounded money figures for an order."""

    subtotal: Decimal
    shipping_fee: Decimal
    tax_amount: Decimal
    discount: Decimal
    total_amount: Decimal


def round_money(value: Decimal) -> Decimal:
    """Round a Decimal to currency precision (half-up)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    """Convert a database or request number to Decimal without float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_subtotal(items: Iterable[PricedLine]) -> Decimal:
    """Sum unit_price * quantity over the lines, unrounded."""
    return sum((item.unit_price * item.quantity for item in items), ZERO)


def calculate_order_pricing(
    items: Iterable[PricedLine],
    shipping_fee: Decimal | None = None,
    tax_rate: Decimal | None = None,
    discount_amount: Decimal | None = None,
    discount_percent: Decimal | None = None,
) -> PricingBreakdown:
    """Price an order from server-trusted unit prices.

    Tax is charged on the discounted subtotal and never on shipping.
    A fixed discount_amount wins over discount_percent when both are given.

    Args:
        items: Lines with unit_price and quantity taken from the catalog.
        shipping_fee: Flat shipping charge.
        tax_rate: Tax rate in percent.
        discount_amount: Absolute discount; the caller caps it at the subtotal.
        discount_percent: Discount as a percentage of the subtotal.

    Returns:
        PricingBreakdown: Figures rounded to two decimal places.
    """
    subtotal = calculate_subtotal(items)
    shipping = shipping_fee or ZERO

    if discount_amount is not None:
        discount = discount_amount
    elif discount_percent is not None:
        discount = subtotal * discount_percent / HUNDRED
    else:
        discount = ZERO

    taxable_amount = max(ZERO, subtotal - discount)
    tax = taxable_amount * tax_rate / HUNDRED if tax_rate else ZERO

    subtotal = round_money(subtotal)
    shipping = round_money(shipping)
    tax = round_money(tax)
    discount = round_money(discount)

    # Sum of the stored figures so total == subtotal + shipping + tax - discount holds exactly
    return PricingBreakdown(
        subtotal=subtotal,
        shipping_fee=shipping,
        tax_amount=tax,
        discount=discount,
        total_amount=subtotal + shipping + tax - discount,
    )
