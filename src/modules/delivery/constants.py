"""Delivery constants: the driver flow and its ordering."""

from django.db import models


class TrackingStatus(models.TextChoices):
    ASSIGNED = "assigned", "Assigned"
    PICKED_UP = "picked_up", "Picked up"
    IN_TRANSIT = "in_transit", "In transit"
    NEARBY = "nearby", "Nearby"
    DELIVERED = "delivered", "Delivered"
    FAILED = "failed", "Failed"


# Forward-only; skipping ahead is allowed.
DRIVER_FLOW: list[str] = [
    TrackingStatus.ASSIGNED,
    TrackingStatus.PICKED_UP,
    TrackingStatus.IN_TRANSIT,
    TrackingStatus.NEARBY,
    TrackingStatus.DELIVERED,
]

FINAL_TRACKING_STATES: frozenset[str] = frozenset(
    {TrackingStatus.DELIVERED, TrackingStatus.FAILED}
)

DEFAULT_ESTIMATED_MINUTES = 120
DEFAULT_EXPRESS_HOURS = 1
