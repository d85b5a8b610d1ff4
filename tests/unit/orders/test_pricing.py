"""Unit tests for checkout arithmetic.

Shop settings and zones are plain namespaces: the pricing functions
only read attributes.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from modules.orders import pricing

pytestmark = pytest.mark.unit


@pytest.fixture()
def shop():
    return SimpleNamespace(
        vat_rate=Decimal("0.05"),
        delivery_fee=Decimal("15.00"),
        free_delivery_threshold=Decimal("200.00"),
        express_delivery_fee=Decimal("25.00"),
        minimum_order_amount=Decimal("50.00"),
    )


def _zone(**overrides):
    values = {
        "is_active": True,
        "delivery_fee": Decimal("10.00"),
        "express_fee": Decimal("30.00"),
        "minimum_order": Decimal("75.00"),
        "estimated_minutes": 90,
        "express_hours": 2,
        "covers": lambda emirate, area=None: emirate == "Dubai",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSubtotal:
    def test_each_line_is_rounded_before_summing(self):
        lines = [(Decimal("0.5"), Decimal("10.01")), (Decimal("0.5"), Decimal("10.01"))]
        # 5.01 + 5.01
        assert pricing.subtotal(lines) == Decimal("10.02")

    def test_line_total(self):
        assert pricing.line_total(Decimal("1.250"), Decimal("49.00")) == Decimal("61.25")


class TestDeliveryFee:
    def test_zone_fee_below_threshold(self, shop):
        fee = pricing.delivery_fee(Decimal("100"), Decimal("0"), shop, zone=_zone())
        assert fee == Decimal("10.00")

    def test_shop_fee_without_zone(self, shop):
        assert pricing.delivery_fee(Decimal("100"), Decimal("0"), shop) == Decimal("15.00")

    def test_free_at_threshold(self, shop):
        fee = pricing.delivery_fee(Decimal("200"), Decimal("0"), shop, zone=_zone())
        assert fee == Decimal("0.00")

    def test_threshold_uses_discounted_subtotal(self, shop):
        fee = pricing.delivery_fee(Decimal("210"), Decimal("20"), shop, zone=_zone())
        assert fee == Decimal("10.00")

    def test_express_is_never_free(self, shop):
        fee = pricing.delivery_fee(Decimal("500"), Decimal("0"), shop, zone=_zone(), is_express=True)
        assert fee == Decimal("30.00")

    def test_express_without_zone_uses_shop_fee(self, shop):
        fee = pricing.delivery_fee(Decimal("50"), Decimal("0"), shop, is_express=True)
        assert fee == Decimal("25.00")


class TestMinimumOrder:
    def test_larger_of_shop_and_zone(self, shop):
        assert pricing.minimum_order(shop, _zone()) == Decimal("75.00")
        assert pricing.minimum_order(shop, _zone(minimum_order=Decimal("20"))) == Decimal("50.00")

    def test_shop_minimum_without_zone(self, shop):
        assert pricing.minimum_order(shop) == Decimal("50.00")


class TestBreakdown:
    def test_total_composition(self):
        totals = pricing.breakdown(
            [(Decimal("2"), Decimal("50.00"))],
            discount=Decimal("10.00"),
            fee=Decimal("10.00"),
            driver_tip=Decimal("5.00"),
            vat_rate=Decimal("0.05"),
        )
        assert totals.subtotal == Decimal("100.00")
        assert totals.vat_amount == Decimal("4.50")
        assert totals.total == Decimal("109.50")

    def test_discount_is_capped_at_subtotal(self):
        totals = pricing.breakdown(
            [(Decimal("1"), Decimal("30.00"))],
            discount=Decimal("50.00"),
            fee=Decimal("0"),
            driver_tip=Decimal("0"),
            vat_rate=Decimal("0.05"),
        )
        assert totals.discount == Decimal("30.00")
        assert totals.vat_amount == Decimal("0.00")
        assert totals.total == Decimal("0.00")

    def test_as_dict_keys_match_order_fields(self):
        totals = pricing.breakdown([], Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0.05"))
        assert set(totals.as_dict()) == {
            "subtotal",
            "discount",
            "delivery_fee",
            "driver_tip",
            "vat_rate",
            "vat_amount",
            "total",
        }


class TestZoneMatching:
    def test_first_active_covering_zone(self):
        inactive = _zone(is_active=False)
        active = _zone()
        assert pricing.match_zone([inactive, active], "Dubai", "JBR") is active

    def test_no_zone_covers(self):
        assert pricing.match_zone([_zone()], "Sharjah", "Al Nahda") is None


class TestEstimatedDelivery:
    def test_zone_minutes(self):
        now = datetime(2026, 1, 1, 10, 0)
        assert pricing.estimated_delivery_at(now, _zone()) == now + timedelta(minutes=90)

    def test_express_hours(self):
        now = datetime(2026, 1, 1, 10, 0)
        assert pricing.estimated_delivery_at(now, _zone(), is_express=True) == now + timedelta(hours=2)

    def test_default_without_zone(self):
        now = datetime(2026, 1, 1, 10, 0)
        assert pricing.estimated_delivery_at(now) == now + timedelta(minutes=120)
