"""Human-readable order and transaction numbers."""

import secrets
import string
import time

_BASE36_DIGITS = string.digits + string.ascii_uppercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def _timestamp_part() -> str:
    # Microsecond wall clock
    return _to_base36(time.time_ns() // 1_000)


def _random_part(length: int) -> str:
    return "".join(secrets.choice(_BASE36_DIGITS) for _ in range(length))


def generate_order_number() -> str:
    """Return a number like ``ORD-LZ3K9Q2X1-7Q2M4A``.

    Not unique by construction; the orders.order_number unique
    constraint is what rejects a collision.
    """
    return f"ORD-{_timestamp_part()}-{_random_part(6)}"


def generate_transaction_number() -> str:
    """Return a number like ``TXN-LZ3K9Q2X1-7Q2M4A9C``."""
    return f"TXN-{_timestamp_part()}-{_random_part(8)}"
