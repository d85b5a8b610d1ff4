"""Domain events raised by the PurchaseOrder aggregate."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class PurchaseOrderReceived(DomainEvent):
    """Goods were booked in; ``amount`` is their cost including VAT.

    ``account_id`` is empty when the goods were taken on credit.
    """

    order_number: str = ""
    supplier_name: str = ""
    amount: str = "0.00"
    account_id: str = ""
    fully_received: bool = False


@dataclass(frozen=True)
class PurchaseOrderPaid(DomainEvent):
    order_number: str = ""
    supplier_name: str = ""
    amount: str = "0.00"
    account_id: str = ""
