"""Cashback for delivered orders."""

from __future__ import annotations

from modules.core.money import to_decimal
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged
from modules.wallet.factories import build_wallet_service
from shared.domain.bus import IEventHandler


class DeliveredCashbackHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        if event.new_status != OrderStatus.DELIVERED:
            return
        build_wallet_service().cashback(
            event.customer_id, to_decimal(event.total), event.order_number
        )


delivered_cashback_handler = DeliveredCashbackHandler()

SUBSCRIPTIONS = ((OrderStatusChanged, delivered_cashback_handler),)
