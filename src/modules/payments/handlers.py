"""Keep the payment ledger in step with captures recorded on orders."""

from __future__ import annotations

from modules.orders.events import OrderPaymentCaptured
from modules.payments.factories import build_payment_service
from shared.domain.bus import IEventHandler


class OrderPaymentCapturedHandler(IEventHandler[OrderPaymentCaptured]):
    def handle(self, event: OrderPaymentCaptured) -> None:
        build_payment_service().record_order_capture(str(event.aggregate_id))


order_payment_captured_handler = OrderPaymentCapturedHandler()

SUBSCRIPTIONS = ((OrderPaymentCaptured, order_payment_captured_handler),)
