"""Post payments and supplier purchases to the finance ledger."""

from __future__ import annotations

from modules.core.money import to_decimal
from modules.finance.factories import build_finance_service
from modules.payments.events import PaymentCaptured, PaymentRefunded
from modules.suppliers.events import PurchaseOrderPaid, PurchaseOrderReceived
from shared.domain.bus import IEventHandler


class PaymentCapturedHandler(IEventHandler[PaymentCaptured]):
    def handle(self, event: PaymentCaptured) -> None:
        build_finance_service().record_sale(
            str(event.aggregate_id), event.order_number, to_decimal(event.amount), event.method
        )


class PaymentRefundedHandler(IEventHandler[PaymentRefunded]):
    def handle(self, event: PaymentRefunded) -> None:
        build_finance_service().record_refund(
            str(event.aggregate_id),
            event.order_number,
            to_decimal(event.amount),
            event.method,
            reason=event.reason,
        )


class PurchaseOrderReceivedHandler(IEventHandler[PurchaseOrderReceived]):
    def handle(self, event: PurchaseOrderReceived) -> None:
        build_finance_service().record_purchase(
            str(event.aggregate_id),
            event.order_number,
            event.supplier_name,
            to_decimal(event.amount),
            account_id=event.account_id or None,
        )


class PurchaseOrderPaidHandler(IEventHandler[PurchaseOrderPaid]):
    def handle(self, event: PurchaseOrderPaid) -> None:
        build_finance_service().record_supplier_payment(
            str(event.aggregate_id),
            event.order_number,
            event.supplier_name,
            to_decimal(event.amount),
            event.account_id,
        )


payment_captured_handler = PaymentCapturedHandler()
payment_refunded_handler = PaymentRefundedHandler()
purchase_order_received_handler = PurchaseOrderReceivedHandler()
purchase_order_paid_handler = PurchaseOrderPaidHandler()

SUBSCRIPTIONS = (
    (PaymentCaptured, payment_captured_handler),
    (PaymentRefunded, payment_refunded_handler),
    (PurchaseOrderReceived, purchase_order_received_handler),
    (PurchaseOrderPaid, purchase_order_paid_handler),
)
