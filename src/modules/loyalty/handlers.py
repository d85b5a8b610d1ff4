from __future__ import annotations

from modules.core.money import to_decimal
from modules.loyalty.factories import build_loyalty_service
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged
from shared.domain.bus import IEventHandler


class DeliveredPointsHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        if event.new_status != OrderStatus.DELIVERED:
            return
        build_loyalty_service().award_order_points(
            event.customer_id,
            str(event.aggregate_id),
            to_decimal(event.total),
            event.order_number,
        )


delivered_points_handler = DeliveredPointsHandler()

SUBSCRIPTIONS = ((OrderStatusChanged, delivered_points_handler),)
