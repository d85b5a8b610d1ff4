"""Django ORM implementations of the delivery repositories."""

from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import Count, Q, QuerySet

from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.delivery.constants import FINAL_TRACKING_STATES
from modules.delivery.models import DeliveryTracking, DeliveryZone
from modules.delivery.repositories.interfaces import (
    IDeliveryZoneRepository,
    ITrackingRepository,
)


class DeliveryZoneDjangoRepository(IDeliveryZoneRepository):
    def get_by_id(self, id: str) -> Optional[DeliveryZone]:
        try:
            return DeliveryZone.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = DeliveryZone.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def active(self) -> QuerySet:
        return DeliveryZone.objects.filter(is_active=True).order_by("emirate", "name", "id")

    def save(self, entity: DeliveryZone) -> DeliveryZone:
        entity.save()
        return entity


class TrackingDjangoRepository(ITrackingRepository):
    def _queryset(self) -> QuerySet:
        return DeliveryTracking.objects.select_related("order", "order__customer", "driver")

    def get_by_id(self, id: str) -> Optional[DeliveryTracking]:
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_order(self, order_id: str) -> Optional[DeliveryTracking]:
        try:
            return self._queryset().filter(order_id=order_id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_order_for_update(self, order_id: str) -> Optional[DeliveryTracking]:
        try:
            return (
                DeliveryTracking.objects.select_for_update()
                .filter(order_id=order_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: DeliveryTracking) -> DeliveryTracking:
        entity.save()
        return entity

    def drivers_with_load(self) -> QuerySet:
        return (
            User.objects.filter(role=UserRole.DELIVERY, is_active=True)
            .annotate(
                active_deliveries=Count(
                    "deliveries",
                    filter=~Q(deliveries__status__in=FINAL_TRACKING_STATES),
                )
            )
            .order_by("first_name", "username")
        )
