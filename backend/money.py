from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from config import settings

_CENT = Decimal("0.01")


def to_amount(value: Any) -> float:
    """Round a monetary value to two places; Postgres numerics arrive as strings."""
    if value in (None, ""):
        return 0.0
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_price(amount: Any, symbol: str | None = None) -> str:
    """Render an amount the way en-IN currency formatting does, e.g. ₹1,23,456.50."""
    value = Decimal(str(amount or 0)).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    prefix = settings.currency_symbol if symbol is None else symbol
    return f"{sign}{prefix}{_group_indian(whole)}.{fraction}"
