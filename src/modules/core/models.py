"""Shared abstract models and shop-wide persistence.

- ``BaseModel``: UUIDv7 primary key plus ``created_at`` / ``updated_at``.
- ``SoftDeleteModel``: ``deleted_at`` timestamp with ``alive()`` / ``dead()``.
- ``OutboxEvent``: domain events persisted with the data that raised them.
- ``ShopSettings``: singleton row holding VAT, delivery and reward settings.

``objects`` on soft-deletable models is unfiltered; callers ask for
``.alive()`` explicitly.
"""

from __future__ import annotations

from decimal import Decimal

import uuid6
from django.core.cache import cache
from django.db import models
from django.utils import timezone


class BaseModel(models.Model):
    """Abstract base with a time-ordered UUID and audit timestamps."""

    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        # auto_now is skipped when update_fields omits it
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=True)

    def dead(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=False)

    def delete(self) -> tuple[int, dict[str, int]]:
        now = timezone.now()
        count = self.alive().update(deleted_at=now, updated_at=now)
        return count, {self.model._meta.label: count}

    def hard_delete(self) -> tuple[int, dict[str, int]]:
        return super().delete()


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    pass


class SoftDeleteModel(BaseModel):
    """Abstract model removed by stamping ``deleted_at`` instead of a DELETE."""

    deleted_at = models.DateTimeField(null=True, blank=True, default=None, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])
        return 1, {self._meta.label: 1}

    def hard_delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        return super().delete(using=using, keep_parents=keep_parents)

    def restore(self) -> None:
        if not self.is_deleted:
            return
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEvent(BaseModel):
    """Domain event written in the same transaction as its aggregate.

    ``core.relay_outbox_events`` picks up ``PENDING`` rows in creation
    order and marks them ``PUBLISHED`` (or ``FAILED`` with the error and an
    incremented ``retry_count``).
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20, choices=EventStatus.choices, default=EventStatus.PENDING
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["event_type"], name="outbox_event_type_idx"),
            models.Index(fields=["aggregate_id"], name="outbox_aggregate_id_idx"),
            models.Index(fields=["status", "created_at"], name="outbox_status_created_idx"),
        ]

    def mark_as_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.save(update_fields=["status", "processed_at"])

    def mark_as_failed(self, error: str) -> None:
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"


# ---------------------------------------------------------------------------
# Shop settings
# ---------------------------------------------------------------------------


class ShopSettings(BaseModel):
    """Singleton with the commercial knobs used by checkout and rewards.

    Read through ``ShopSettings.load()``, which caches the row and creates
    it with defaults on first access.
    """

    CACHE_KEY = "shop_settings"
    CACHE_TIMEOUT = 300

    singleton = models.BooleanField(default=True, unique=True, editable=False)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0.05"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("15.00"))
    free_delivery_threshold = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("200.00")
    )
    express_delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("25.00")
    )
    minimum_order_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("50.00")
    )
    welcome_bonus = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("50.00"))
    cashback_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("2.00")
    )
    loyalty_points_per_aed = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("1.00")
    )
    loyalty_point_value = models.DecimalField(
        max_digits=6, decimal_places=3, default=Decimal("0.100")
    )
    referral_bonus_points = models.PositiveIntegerField(default=100)
    tax_registration_number = models.CharField(max_length=32, blank=True, default="")

    class Meta:
        db_table = "shop_settings"

    @classmethod
    def load(cls) -> ShopSettings:
        instance = cache.get(cls.CACHE_KEY)
        if instance is None:
            instance, _ = cls.objects.get_or_create(singleton=True)
            cache.set(cls.CACHE_KEY, instance, cls.CACHE_TIMEOUT)
        return instance

    def save(self, *args, **kwargs) -> None:
        self.singleton = True
        super().save(*args, **kwargs)
        cache.delete(self.CACHE_KEY)

    def __str__(self) -> str:
        return f"ShopSettings(vat={self.vat_rate})"
