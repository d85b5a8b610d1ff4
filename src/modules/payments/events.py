"""Domain events raised by the Payment aggregate."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class PaymentCaptured(DomainEvent):
    order_id: str = ""
    order_number: str = ""
    amount: str = "0.00"
    method: str = ""


@dataclass(frozen=True)
class PaymentRefunded(DomainEvent):
    order_id: str = ""
    order_number: str = ""
    amount: str = "0.00"
    reason: str = ""
    method: str = ""
    full: bool = False
