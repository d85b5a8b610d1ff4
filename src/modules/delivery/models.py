"""Delivery zones and per-order tracking.

``DeliveryTracking.timeline`` is append-only: each entry is
``{status, timestamp, location, notes}``.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.accounts.constants import Emirate
from modules.core.models import BaseModel
from modules.delivery.constants import (
    DEFAULT_ESTIMATED_MINUTES,
    DEFAULT_EXPRESS_HOURS,
    TrackingStatus,
)


class DeliveryZone(BaseModel):
    name = models.CharField(max_length=100)
    name_ar = models.CharField(max_length=100, blank=True, default="")
    emirate = models.CharField(max_length=32, choices=Emirate.choices)
    areas = models.JSONField(default=list, blank=True)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("15.00"))
    minimum_order = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    estimated_minutes = models.PositiveIntegerField(default=DEFAULT_ESTIMATED_MINUTES)
    express_enabled = models.BooleanField(default=False)
    express_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("25.00"))
    express_hours = models.PositiveIntegerField(default=DEFAULT_EXPRESS_HOURS)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "delivery_zones"
        ordering = ["emirate", "name"]

    def covers(self, emirate: str, area: str | None = None) -> bool:
        """Emirate matches case-insensitively; an empty area list covers all areas."""
        if self.emirate.lower() != (emirate or "").strip().lower():
            return False
        if not self.areas:
            return True
        wanted = (area or "").strip().lower()
        return any(wanted == str(candidate).strip().lower() for candidate in self.areas)

    def __str__(self) -> str:
        return f"{self.name} ({self.emirate})"


class DeliveryTracking(BaseModel):
    order = models.OneToOneField(
        "orders.Order", on_delete=models.CASCADE, related_name="tracking"
    )
    driver = models.ForeignKey(
        "accounts.User", on_delete=models.PROTECT, related_name="deliveries"
    )
    status = models.CharField(
        max_length=20, choices=TrackingStatus.choices, default=TrackingStatus.ASSIGNED
    )
    current_location = models.JSONField(null=True, blank=True, default=None)
    timeline = models.JSONField(default=list, blank=True)
    estimated_arrival = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    delivery_proof = models.JSONField(null=True, blank=True, default=None)

    class Meta:
        db_table = "delivery_tracking"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["driver", "status"], name="tracking_driver_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Tracking({self.order_id}, {self.status})"
