from datetime import date

import pytest

from modules.core.validators import (
    card_brand,
    cvv_valid,
    expiry_valid,
    is_valid_uae_mobile,
    luhn_valid,
    normalize_mobile,
    password_problems,
)

pytestmark = pytest.mark.unit


class TestMobile:
    @pytest.mark.parametrize("value", ["+971 50 123 4567", "+971501234567", " +97155 987 6543 "])
    def test_valid_uae_mobiles(self, value):
        assert is_valid_uae_mobile(value)

    @pytest.mark.parametrize("value", ["0501234567", "+44 20 7946 0958", "+971 50 123"])
    def test_invalid_mobiles(self, value):
        assert not is_valid_uae_mobile(value)

    def test_normalize_strips_spaces(self):
        assert normalize_mobile("+971 50 123 4567") == "+971501234567"


class TestPasswordProblems:
    def test_strong_password_has_no_problems(self):
        assert password_problems("Butcher@123") == []

    def test_weak_password_reports_every_rule(self):
        problems = password_problems("abc")
        assert len(problems) == 3

    def test_missing_special_character(self):
        assert password_problems("Butcher1234") == ["Password must contain a special character."]


class TestCardChecks:
    def test_luhn_accepts_test_visa(self):
        assert luhn_valid("4242 4242 4242 4242")

    def test_luhn_rejects_bad_checksum(self):
        assert not luhn_valid("4242424242424241")

    def test_luhn_rejects_short_numbers(self):
        assert not luhn_valid("4242")

    def test_expiry_in_current_month_is_valid(self):
        assert expiry_valid("03/26", today=date(2026, 3, 31))

    def test_expiry_in_past_is_invalid(self):
        assert not expiry_valid("02/26", today=date(2026, 3, 1))

    def test_malformed_expiry_is_invalid(self):
        assert not expiry_valid("13/30", today=date(2026, 3, 1))

    @pytest.mark.parametrize(("cvv", "ok"), [("123", True), ("1234", True), ("12", False), ("abc", False)])
    def test_cvv(self, cvv, ok):
        assert cvv_valid(cvv) is ok

    @pytest.mark.parametrize(
        ("number", "brand"),
        [
            ("4242424242424242", "Visa"),
            ("5555555555554444", "Mastercard"),
            ("2223003122003222", "Mastercard"),
            ("378282246310005", "Amex"),
            ("6011111111111117", "Card"),
        ],
    )
    def test_card_brand(self, number, brand):
        assert card_brand(number) == brand
