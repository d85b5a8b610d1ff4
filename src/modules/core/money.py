"""Money helpers.

Amounts are ``Decimal`` quantised to two places with ROUND_HALF_UP,
matching how prices are printed on invoices.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats, strings and ``None`` into ``Decimal``."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Any]) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += to_decimal(value)
    return round2(total)


def percentage(part: Any, whole: Any) -> Decimal:
    """``part / whole * 100`` rounded to 2 places, 0 when ``whole`` is zero."""
    whole = to_decimal(whole)
    if whole == 0:
        return ZERO
    return round2(to_decimal(part) / whole * 100)
