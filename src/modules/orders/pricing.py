"""Checkout arithmetic.

Pure functions over ``Decimal``: no queries, no side effects.  ``shop`` is
anything with the ``ShopSettings`` attributes and ``zone`` anything with
the ``DeliveryZone`` attributes, so the rules can be exercised without a
database.

    subtotal   = sum(round2(quantity * effective_price))
    vat        = round2((subtotal - discount) * vat_rate)
    total      = subtotal - discount + vat + delivery_fee + driver_tip
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from modules.core.money import ZERO, money_sum, round2, to_decimal
from modules.orders.constants import DEFAULT_ESTIMATED_MINUTES


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    delivery_fee: Decimal
    driver_tip: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "delivery_fee": self.delivery_fee,
            "driver_tip": self.driver_tip,
            "vat_rate": self.vat_rate,
            "vat_amount": self.vat_amount,
            "total": self.total,
        }


def line_total(quantity: Any, unit_price: Any) -> Decimal:
    return round2(to_decimal(quantity) * to_decimal(unit_price))


def subtotal(lines: Iterable[tuple[Any, Any]]) -> Decimal:
    """Sum of ``(quantity, unit_price)`` line totals."""
    return money_sum(line_total(quantity, price) for quantity, price in lines)


def match_zone(zones: Sequence[Any], emirate: str, area: str | None = None) -> Optional[Any]:
    """First active zone covering the address, or ``None``."""
    for zone in zones:
        if zone.is_active and zone.covers(emirate, area):
            return zone
    return None


def delivery_fee(
    subtotal: Decimal,
    discount: Decimal,
    shop: Any,
    zone: Any = None,
    is_express: bool = False,
) -> Decimal:
    """Delivery charge for the basket.

    Express replaces the base fee and is never free.  Standard delivery is
    free once the discounted subtotal reaches the threshold.
    """
    if is_express:
        fee = zone.express_fee if zone is not None else shop.express_delivery_fee
        return round2(fee)
    if to_decimal(subtotal) - to_decimal(discount) >= to_decimal(shop.free_delivery_threshold):
        return ZERO
    fee = zone.delivery_fee if zone is not None else shop.delivery_fee
    return round2(fee)


def minimum_order(shop: Any, zone: Any = None) -> Decimal:
    """The basket must clear both the shop and the zone minimum."""
    shop_minimum = to_decimal(shop.minimum_order_amount)
    if zone is None:
        return round2(shop_minimum)
    return round2(max(shop_minimum, to_decimal(zone.minimum_order)))


def vat_amount(subtotal: Decimal, discount: Decimal, vat_rate: Decimal) -> Decimal:
    return round2((to_decimal(subtotal) - to_decimal(discount)) * to_decimal(vat_rate))


def breakdown(
    lines: Iterable[tuple[Any, Any]],
    discount: Decimal,
    fee: Decimal,
    driver_tip: Decimal,
    vat_rate: Decimal,
) -> PriceBreakdown:
    sub = subtotal(lines)
    discount = round2(min(to_decimal(discount), sub))
    vat = vat_amount(sub, discount, vat_rate)
    tip = round2(driver_tip)
    fee = round2(fee)
    return PriceBreakdown(
        subtotal=sub,
        discount=discount,
        delivery_fee=fee,
        driver_tip=tip,
        vat_rate=to_decimal(vat_rate),
        vat_amount=vat,
        total=round2(sub - discount + vat + fee + tip),
    )


def estimated_delivery_at(now: datetime, zone: Any = None, is_express: bool = False) -> datetime:
    if zone is None:
        return now + timedelta(minutes=DEFAULT_ESTIMATED_MINUTES)
    if is_express:
        return now + timedelta(hours=zone.express_hours)
    return now + timedelta(minutes=zone.estimated_minutes or DEFAULT_ESTIMATED_MINUTES)
