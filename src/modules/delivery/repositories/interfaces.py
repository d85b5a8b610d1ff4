"""Delivery repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.delivery.models import DeliveryTracking, DeliveryZone


class IDeliveryZoneRepository(IRepository["DeliveryZone"]):
    @abstractmethod
    def active(self) -> QuerySet:
        """Active zones in matching order."""


class ITrackingRepository(IRepository["DeliveryTracking"]):
    @abstractmethod
    def get_for_order(self, order_id: str) -> Optional[DeliveryTracking]:
        """Tracking of one order, with order and driver loaded."""

    @abstractmethod
    def get_for_order_for_update(self, order_id: str) -> Optional[DeliveryTracking]:
        """Same as ``get_for_order`` but row-locked."""

    @abstractmethod
    def drivers_with_load(self) -> QuerySet:
        """Active delivery users annotated with ``active_deliveries``."""
