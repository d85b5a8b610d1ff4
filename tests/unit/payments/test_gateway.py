"""Unit tests for the sandbox card gateway."""

from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured

from modules.payments.gateway import (
    DECLINED_TEST_CARD,
    CardDetails,
    SandboxGateway,
    get_gateway,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def gateway():
    return SandboxGateway()


def _card(number="4242 4242 4242 4242", expiry="12/30", cvv="123"):
    return CardDetails(number=number, expiry=expiry, cvv=cvv, holder_name="Ahmed Ali")


class TestCharge:
    def test_valid_card_is_approved(self, gateway):
        result = gateway.charge(Decimal("115.00"), _card())

        assert result.success
        assert result.transaction_id.startswith("txn_")
        assert result.card_brand == "Visa"
        assert result.card_last4 == "4242"

    def test_declined_test_card(self, gateway):
        result = gateway.charge(Decimal("115.00"), _card(number=DECLINED_TEST_CARD))

        assert not result.success
        assert result.error == "Payment declined. Please try another card."

    def test_luhn_failure(self, gateway):
        result = gateway.charge(Decimal("10"), _card(number="4242424242424241"))
        assert result.error == "Invalid card number"

    def test_expired_card(self, gateway):
        result = gateway.charge(Decimal("10"), _card(expiry="01/20"))
        assert result.error == "Card has expired or expiry is invalid"

    def test_bad_cvv(self, gateway):
        result = gateway.charge(Decimal("10"), _card(cvv="1"))
        assert result.error == "Invalid CVV"


def test_refund_always_succeeds_in_sandbox(gateway):
    result = gateway.refund("txn_abc", Decimal("20.00"))
    assert result.success
    assert result.refund_id.startswith("ref_")


class TestGetGateway:
    def test_sandbox_enabled(self, settings):
        settings.PAYMENT_GATEWAY_SANDBOX = True
        assert isinstance(get_gateway(), SandboxGateway)

    def test_live_mode_is_not_configured(self, settings):
        settings.PAYMENT_GATEWAY_SANDBOX = False
        with pytest.raises(ImproperlyConfigured):
            get_gateway()
