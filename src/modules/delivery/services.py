"""Delivery use cases: zones, driver assignment and live tracking.

Tracking changes drive the order through ``OrderService`` so the order
history, stock commit and payment capture happen in one place.  The order
row is always locked before the tracking row.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from modules.accounts.constants import UserRole
from modules.core.models import ShopSettings
from modules.core.money import to_decimal
from modules.core.permissions import is_staff_user, user_role
from modules.delivery.constants import (
    DRIVER_FLOW,
    FINAL_TRACKING_STATES,
    TrackingStatus,
)
from modules.delivery.dtos import LocationDTO, TrackingStatusDTO
from modules.delivery.exceptions import (
    DeliveryZoneNotFound,
    InvalidDriver,
    InvalidTrackingStatus,
    OrderNotReadyForDelivery,
    TrackingAccessDenied,
    TrackingNotFound,
)
from modules.delivery.models import DeliveryTracking, DeliveryZone
from modules.notifications.constants import NotificationType
from modules.orders import pricing
from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.delivery.dtos import (
        AssignDriverDTO,
        CheckAvailabilityDTO,
        DeliveryProofDTO,
        DeliveryZoneDTO,
    )
    from modules.delivery.repositories.interfaces import (
        IDeliveryZoneRepository,
        ITrackingRepository,
    )
    from modules.notifications.services import NotificationService
    from modules.orders.models import Order
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)

# Tracking states that mean the goods have left the shop.
ON_THE_ROAD = frozenset(
    {TrackingStatus.PICKED_UP, TrackingStatus.IN_TRANSIT, TrackingStatus.NEARBY}
)


def timeline_entry(status: str, location: Optional[dict] = None, notes: str = "") -> dict:
    return {
        "status": status,
        "timestamp": timezone.now().isoformat(),
        "location": location,
        "notes": notes,
    }


def can_move(current: str, new: str) -> bool:
    """Forward along the driver flow, or to ``failed`` from any open state."""
    if current in FINAL_TRACKING_STATES:
        return False
    if new == TrackingStatus.FAILED:
        return True
    if new not in DRIVER_FLOW:
        return False
    return DRIVER_FLOW.index(new) > DRIVER_FLOW.index(current)


def apply_location_fix(tracking: DeliveryTracking, fix: LocationDTO) -> bool:
    """Move ``current_location`` to ``fix`` unless it is not newer than the stored one.

    A fix without a timestamp is taken as of now.
    """
    timestamp = fix.timestamp or timezone.now()
    if timezone.is_naive(timestamp):
        timestamp = timezone.make_aware(timestamp)
    current = tracking.current_location or {}
    stored_at: Optional[datetime] = parse_datetime(current.get("updated_at") or "")
    if stored_at is not None and timestamp <= stored_at:
        logger.info(
            "delivery.stale_location_ignored",
            order_id=str(tracking.order_id),
            stored_at=stored_at.isoformat(),
        )
        return False
    tracking.current_location = {
        "lat": fix.lat,
        "lng": fix.lng,
        "updated_at": timestamp.isoformat(),
    }
    return True


class DeliveryZoneService:
    def __init__(self, repository: IDeliveryZoneRepository) -> None:
        self._repo = repository

    def list_zones(self, include_inactive: bool = False):
        return self._repo.list(None if include_inactive else {"is_active": True})

    def get_zone(self, id: str) -> DeliveryZone:
        zone = self._repo.get_by_id(id)
        if zone is None:
            raise DeliveryZoneNotFound()
        return zone

    @transaction.atomic
    def create_zone(self, dto: DeliveryZoneDTO) -> DeliveryZone:
        zone = self._repo.save(DeliveryZone(**dto.model_dump()))
        logger.info("delivery_zone.created", zone_id=str(zone.id), emirate=zone.emirate)
        return zone

    @transaction.atomic
    def update_zone(self, id: str, data: Dict[str, Any]) -> DeliveryZone:
        zone = self.get_zone(id)
        for field, value in data.items():
            setattr(zone, field, value)
        return self._repo.save(zone)

    @transaction.atomic
    def deactivate_zone(self, id: str) -> DeliveryZone:
        zone = self.get_zone(id)
        zone.is_active = False
        self._repo.save(zone)
        logger.info("delivery_zone.deactivated", zone_id=str(id))
        return zone

    def check_availability(self, dto: CheckAvailabilityDTO) -> dict:
        shop = ShopSettings.load()
        zone = pricing.match_zone(list(self._repo.active()), dto.emirate, dto.area)
        if zone is None:
            return {
                "available": False,
                "zone": None,
                "message": f"Delivery is not available to {dto.emirate}"
                + (f" ({dto.area})" if dto.area else ""),
            }
        minimum = pricing.minimum_order(shop, zone)
        order_total = to_decimal(dto.order_total)
        return {
            "available": True,
            "zone": {"id": str(zone.id), "name": zone.name, "name_ar": zone.name_ar},
            "delivery_fee": pricing.delivery_fee(order_total, to_decimal(0), shop, zone=zone),
            "express_available": zone.express_enabled,
            "express_fee": zone.express_fee if zone.express_enabled else None,
            "express_hours": zone.express_hours if zone.express_enabled else None,
            "estimated_minutes": zone.estimated_minutes,
            "free_delivery_threshold": shop.free_delivery_threshold,
            "minimum_order": minimum,
            "meets_minimum": order_total >= minimum,
        }


class DeliveryService:
    def __init__(
        self,
        tracking_repository: ITrackingRepository,
        user_repository: IUserRepository,
        order_service: OrderService,
        notification_service: NotificationService,
    ) -> None:
        self._tracking = tracking_repository
        self._users = user_repository
        self._orders = order_service
        self._notifications = notification_service

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    @transaction.atomic
    def assign(self, dto: AssignDriverDTO, assigned_by: User | None = None) -> DeliveryTracking:
        driver = self._users.get_by_id(dto.driver_id)
        if driver is None or driver.role != UserRole.DELIVERY or not driver.is_active:
            raise InvalidDriver()

        order = self._orders.lock_order(dto.order_id)
        log = logger.bind(order_id=str(order.id), driver_id=str(driver.id))
        if order.status == OrderStatus.PROCESSING:
            self._orders.transition_locked(
                order,
                OrderStatus.READY_FOR_PICKUP,
                changed_by=assigned_by,
                notes="Ready for pickup on driver assignment",
            )
        elif order.status != OrderStatus.READY_FOR_PICKUP:
            log.warning("delivery.order_not_ready", status=order.status)
            raise OrderNotReadyForDelivery(
                f"Order is {order.status}; it must be processing or ready for pickup."
            )

        tracking = self._tracking.get_for_order_for_update(str(order.id))
        note = f"Assigned to {driver.full_name or driver.username}"
        if tracking is None:
            tracking = DeliveryTracking(order=order, driver=driver, timeline=[])
        else:
            note = f"Re-assigned to {driver.full_name or driver.username}"
            tracking.driver = driver
        tracking.status = TrackingStatus.ASSIGNED
        tracking.estimated_arrival = dto.estimated_arrival or order.estimated_delivery_at
        tracking.timeline = [*tracking.timeline, timeline_entry(TrackingStatus.ASSIGNED, notes=note)]
        self._tracking.save(tracking)

        self._notifications.notify_user(
            order.customer_id,
            "Driver assigned",
            f"A driver has been assigned to order {order.order_number}.",
            type=NotificationType.DELIVERY,
            link=f"/orders/{order.id}/tracking",
        )
        self._notifications.notify_user(
            driver,
            "New delivery",
            f"You have been assigned order {order.order_number}.",
            type=NotificationType.DELIVERY,
            link=f"/driver/deliveries/{order.id}",
        )
        log.info("delivery.assigned")
        return tracking

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_tracking_for(self, user: User, order_id: str) -> DeliveryTracking:
        tracking = self._tracking.get_for_order(order_id)
        if tracking is None:
            raise TrackingNotFound()
        self._check_read_access(user, tracking)
        return tracking

    def list_tracking_for(self, user: User):
        if is_staff_user(user):
            return self._tracking.list()
        if user_role(user) == UserRole.DELIVERY:
            return self._tracking.list({"driver": user})
        return self._tracking.list({"order__customer": user})

    def drivers(self):
        return self._tracking.drivers_with_load()

    def _check_read_access(self, user: User, tracking: DeliveryTracking) -> None:
        if is_staff_user(user):
            return
        if tracking.driver_id == user.id or tracking.order.customer_id == user.id:
            return
        raise TrackingAccessDenied()

    def _check_driver(self, user: User, tracking: DeliveryTracking, allow_staff: bool) -> None:
        if tracking.driver_id == user.id:
            return
        if allow_staff and is_staff_user(user):
            return
        raise TrackingAccessDenied("Only the assigned driver can update this delivery.")

    # ------------------------------------------------------------------
    # Driver updates
    # ------------------------------------------------------------------

    def _locked_tracking(self, order_id: str) -> DeliveryTracking:
        tracking = self._tracking.get_for_order_for_update(order_id)
        if tracking is None:
            raise TrackingNotFound()
        return tracking

    @transaction.atomic
    def update_location(
        self, user: User, order_id: str, dto: LocationDTO
    ) -> tuple[DeliveryTracking, bool]:
        """Store the driver's position; older fixes than the stored one are ignored."""
        tracking = self._locked_tracking(order_id)
        self._check_driver(user, tracking, allow_staff=False)

        if not apply_location_fix(tracking, dto):
            return tracking, False
        self._tracking.save(tracking)
        return tracking, True

    @transaction.atomic
    def update_status(
        self, user: User, order_id: str, dto: TrackingStatusDTO, proof: dict | None = None
    ) -> DeliveryTracking:
        order = self._orders.lock_order(order_id)
        tracking = self._locked_tracking(str(order.id))
        self._check_driver(user, tracking, allow_staff=True)
        log = logger.bind(order_id=str(order.id), old_status=tracking.status, new_status=dto.status)

        if not can_move(tracking.status, dto.status):
            log.warning("delivery.invalid_status")
            raise InvalidTrackingStatus(
                f"Cannot change delivery from {tracking.status} to {dto.status}."
            )

        location = dto.location.model_dump(mode="json") if dto.location else None
        tracking.status = dto.status
        tracking.timeline = [
            *tracking.timeline,
            timeline_entry(dto.status, location=location, notes=dto.notes),
        ]
        if dto.location is not None:
            apply_location_fix(tracking, dto.location)
        if proof is not None:
            tracking.delivery_proof = proof

        if dto.status in ON_THE_ROAD:
            self._ensure_out_for_delivery(order, user)
        elif dto.status == TrackingStatus.DELIVERED:
            tracking.delivered_at = timezone.now()
            self._ensure_out_for_delivery(order, user)
            self._orders.transition_locked(
                order, OrderStatus.DELIVERED, changed_by=user, notes="Delivered by driver"
            )
        elif dto.status == TrackingStatus.FAILED:
            self._notifications.notify_admins(
                "Delivery failed",
                f"Delivery of order {order.order_number} failed. {dto.notes}".strip(),
                type=NotificationType.DELIVERY,
                link=f"/admin/orders/{order.id}",
            )

        if dto.status == TrackingStatus.NEARBY:
            self._notifications.notify_user(
                order.customer_id,
                "Driver nearby",
                f"Your driver is almost there with order {order.order_number}.",
                type=NotificationType.DELIVERY,
                link=f"/orders/{order.id}/tracking",
            )

        self._tracking.save(tracking)
        log.info("delivery.status_updated")
        return tracking

    @transaction.atomic
    def complete(self, user: User, order_id: str, dto: DeliveryProofDTO) -> DeliveryTracking:
        tracking = self._tracking.get_for_order(order_id)
        if tracking is None:
            raise TrackingNotFound()
        self._check_driver(user, tracking, allow_staff=False)
        return self.update_status(
            user,
            order_id,
            TrackingStatusDTO(status=TrackingStatus.DELIVERED, notes=dto.notes),
            proof={**dto.model_dump(), "received_at": timezone.now().isoformat()},
        )

    def _ensure_out_for_delivery(self, order: Order, user: User) -> None:
        if order.status == OrderStatus.READY_FOR_PICKUP:
            self._orders.transition_locked(
                order, OrderStatus.OUT_FOR_DELIVERY, changed_by=user, notes="Picked up by driver"
            )
