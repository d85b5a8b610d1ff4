"""Order event handlers: customer and back-office notifications.

Loyalty points and wallet cashback for delivered orders are handled in
their own modules, subscribed to the same ``OrderStatusChanged`` event.
"""

from __future__ import annotations

import structlog

from modules.notifications.constants import NotificationType
from modules.notifications.repositories.django_repository import NotificationDjangoRepository
from modules.notifications.services import NotificationService
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)

STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: "Your order {number} has been confirmed.",
    OrderStatus.PROCESSING: "Your order {number} is being prepared.",
    OrderStatus.READY_FOR_PICKUP: "Your order {number} is packed and waiting for a driver.",
    OrderStatus.OUT_FOR_DELIVERY: "Your order {number} is on its way.",
    OrderStatus.DELIVERED: "Your order {number} has been delivered. Enjoy!",
    OrderStatus.REFUNDED: "Your order {number} has been refunded.",
}


def _notifications() -> NotificationService:
    return NotificationService(NotificationDjangoRepository())


def _order_link(order_id) -> str:
    return f"/orders/{order_id}"


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        service = _notifications()
        link = _order_link(event.aggregate_id)
        service.notify_user(
            event.customer_id,
            "Order placed",
            f"Your order {event.order_number} for {event.total} AED has been received.",
            type=NotificationType.ORDER,
            link=link,
        )
        service.notify_admins(
            "New order",
            f"Order {event.order_number} placed for {event.total} AED.",
            type=NotificationType.ORDER,
            link=link,
        )
        logger.info("order.created_notified", order_id=str(event.aggregate_id))


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        template = STATUS_MESSAGES.get(event.new_status)
        if template is None:
            return
        service = _notifications()
        link = _order_link(event.aggregate_id)
        service.notify_user(
            event.customer_id,
            f"Order {event.new_status.replace('_', ' ')}",
            template.format(number=event.order_number),
            type=NotificationType.ORDER,
            link=link,
        )
        if event.new_status == OrderStatus.CONFIRMED:
            service.notify_user(
                event.customer_id,
                "Invoice ready",
                f"The invoice for order {event.order_number} ({event.total} AED) is available.",
                type=NotificationType.PAYMENT,
                link=f"{link}/invoice",
            )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        _notifications().notify_user(
            event.customer_id,
            "Order cancelled",
            f"Your order {event.order_number} has been cancelled.",
            type=NotificationType.ORDER,
            link=_order_link(event.aggregate_id),
        )


order_created_handler = OrderCreatedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()

SUBSCRIPTIONS = (
    (OrderCreated, order_created_handler),
    (OrderStatusChanged, order_status_changed_handler),
    (OrderCancelled, order_cancelled_handler),
)
