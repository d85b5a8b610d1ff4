"""Card gateway abstraction and the sandbox used outside production.

The sandbox validates the card the way a real acquirer would reject it
(Luhn, expiry, CVV) and declines the well-known test number
``4000 0000 0000 0002``.  Every other valid card is approved.
"""

from __future__ import annotations

import re
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from modules.core.validators import card_brand, cvv_valid, expiry_valid, luhn_valid

logger = structlog.get_logger(__name__)

DECLINED_TEST_CARD = "4000000000000002"


@dataclass(frozen=True)
class CardDetails:
    number: str
    expiry: str
    cvv: str
    holder_name: str = ""

    @property
    def digits(self) -> str:
        return re.sub(r"\D", "", self.number)

    @property
    def last4(self) -> str:
        return self.digits[-4:]


@dataclass(frozen=True)
class ChargeResult:
    success: bool
    transaction_id: str = ""
    card_brand: str = ""
    card_last4: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    refund_id: str = ""
    error: Optional[str] = None


class PaymentGateway(ABC):
    @abstractmethod
    def charge(self, amount: Decimal, card: CardDetails) -> ChargeResult:
        """Authorise and capture ``amount`` AED on ``card``."""

    @abstractmethod
    def refund(self, transaction_id: str, amount: Decimal) -> RefundResult:
        """Refund ``amount`` AED of an earlier charge."""


class SandboxGateway(PaymentGateway):
    def charge(self, amount: Decimal, card: CardDetails) -> ChargeResult:
        log = logger.bind(amount=str(amount), card_last4=card.last4)
        if not luhn_valid(card.number):
            return ChargeResult(success=False, error="Invalid card number")
        if not expiry_valid(card.expiry):
            return ChargeResult(success=False, error="Card has expired or expiry is invalid")
        if not cvv_valid(card.cvv):
            return ChargeResult(success=False, error="Invalid CVV")
        if card.digits == DECLINED_TEST_CARD:
            log.info("gateway.declined")
            return ChargeResult(success=False, error="Payment declined. Please try another card.")

        transaction_id = f"txn_{secrets.token_hex(8)}"
        log.info("gateway.charged", transaction_id=transaction_id)
        return ChargeResult(
            success=True,
            transaction_id=transaction_id,
            card_brand=card_brand(card.number),
            card_last4=card.last4,
        )

    def refund(self, transaction_id: str, amount: Decimal) -> RefundResult:
        refund_id = f"ref_{secrets.token_hex(8)}"
        logger.info(
            "gateway.refunded",
            transaction_id=transaction_id,
            refund_id=refund_id,
            amount=str(amount),
        )
        return RefundResult(success=True, refund_id=refund_id)


def get_gateway() -> PaymentGateway:
    if settings.PAYMENT_GATEWAY_SANDBOX:
        return SandboxGateway()
    raise ImproperlyConfigured(
        "No live payment gateway is configured; set PAYMENT_GATEWAY_SANDBOX=True."
    )
