"""Domain events raised by the Order aggregate."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    order_number: str = ""
    customer_id: str = ""
    total: str = "0.00"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    order_number: str = ""
    customer_id: str = ""
    old_status: str = ""
    new_status: str = ""
    total: str = "0.00"


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    order_number: str = ""
    customer_id: str = ""
    reason: str = ""


@dataclass(frozen=True)
class OrderPaymentCaptured(DomainEvent):
    """Money for the order was collected outside the payment gateway (e.g. COD)."""

    order_number: str = ""
    amount: str = "0.00"
    method: str = ""
