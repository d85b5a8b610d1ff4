"""Unit tests for the money helpers."""

from decimal import Decimal

import pytest

from modules.core.money import ZERO, money_sum, percentage, round2, to_decimal

pytestmark = pytest.mark.unit


class TestToDecimal:
    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_is_returned_as_is(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value

    def test_garbage_raises_value_error(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            to_decimal("twelve")


class TestRound2:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2.345", Decimal("2.35")),
            ("2.344", Decimal("2.34")),
            ("0.005", Decimal("0.01")),
            (10, Decimal("10.00")),
        ],
    )
    def test_rounds_half_up(self, value, expected):
        assert round2(value) == expected


class TestMoneySum:
    def test_sums_mixed_inputs(self):
        assert money_sum([Decimal("10.10"), "5.05", 1]) == Decimal("16.15")

    def test_empty_is_zero(self):
        assert money_sum([]) == ZERO


class TestPercentage:
    def test_percentage_of_whole(self):
        assert percentage(25, 200) == Decimal("12.50")

    def test_zero_whole_is_zero(self):
        assert percentage(10, 0) == ZERO
