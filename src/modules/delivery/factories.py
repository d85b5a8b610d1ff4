from __future__ import annotations

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.delivery.repositories.django_repository import (
    DeliveryZoneDjangoRepository,
    TrackingDjangoRepository,
)
from modules.delivery.services import DeliveryService, DeliveryZoneService
from modules.notifications.repositories.django_repository import NotificationDjangoRepository
from modules.notifications.services import NotificationService
from modules.orders.factories import build_order_service


def build_zone_service() -> DeliveryZoneService:
    return DeliveryZoneService(DeliveryZoneDjangoRepository())


def build_delivery_service() -> DeliveryService:
    return DeliveryService(
        tracking_repository=TrackingDjangoRepository(),
        user_repository=UserDjangoRepository(),
        order_service=build_order_service(),
        notification_service=NotificationService(NotificationDjangoRepository()),
    )
