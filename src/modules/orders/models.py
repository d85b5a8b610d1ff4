"""Order, OrderItem, OrderStatusHistory and InvoiceSequence models.

- ``order_number`` (``ORD-YYYYMMDD-XXXXXX``) is generated on first save.
- ``invoice_number`` (``INV-YYYYMM-NNNNN``) is assigned on confirmation.
- Items snapshot product name, SKU, unit and effective price; later
  catalog edits never change an existing order.
- ``delivery_address`` is a JSON snapshot of the address at checkout.
- ``idempotency_key`` is nullable and unique, so orders created without
  the header never collide.
- Status history is append-only.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

import structlog
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.core.money import round2
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


def _money(**kwargs: Any) -> models.DecimalField:
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root."""

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "accounts.User", on_delete=models.PROTECT, related_name="orders"
    )

    subtotal = _money()
    discount = _money()
    discount_code = models.CharField(max_length=40, blank=True, default="")
    delivery_fee = _money()
    driver_tip = _money()
    vat_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0.05"))
    vat_amount = _money()
    total = _money()

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.COD
    )

    delivery_address = models.JSONField(default=dict)
    delivery_zone = models.ForeignKey(
        "delivery.DeliveryZone",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    is_express = models.BooleanField(default=False)
    estimated_delivery_at = models.DateTimeField(null=True, blank=True)
    actual_delivery_at = models.DateTimeField(null=True, blank=True)

    invoice_number = models.CharField(max_length=20, unique=True, null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    idempotency_key = models.CharField(max_length=255, unique=True, null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
            models.Index(fields=["customer", "-created_at"], name="orders_customer_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @staticmethod
    def generate_order_number() -> str:
        return f"ORD-{timezone.now():%Y%m%d}-{secrets.token_hex(3).upper()}"

    def assign_invoice_number(self) -> str:
        """``INV-YYYYMM-NNNNN``, numbered sequentially within the month."""
        if self.invoice_number:
            return self.invoice_number
        period = f"{timezone.now():%Y%m}"
        sequence = InvoiceSequence.next_number(period)
        self.invoice_number = f"INV-{period}-{sequence:05d}"
        return self.invoice_number

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class InvoiceSequence(models.Model):
    """Last invoice number handed out per ``YYYYMM`` period.

    The row is locked while a number is drawn, so concurrent confirmations
    queue on it instead of reading the same last invoice.
    """

    period = models.CharField(max_length=6, primary_key=True)
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "invoice_sequences"

    @classmethod
    def next_number(cls, period: str) -> int:
        prefix = f"INV-{period}-"
        last = (
            Order.objects.filter(invoice_number__startswith=prefix)
            .order_by("-invoice_number")
            .values_list("invoice_number", flat=True)
            .first()
        )
        sequence, _ = cls.objects.select_for_update().get_or_create(
            period=period,
            defaults={"last_number": int(last.rsplit("-", 1)[1]) if last else 0},
        )
        sequence.last_number += 1
        sequence.save(update_fields=["last_number"])
        return sequence.last_number

    def __str__(self) -> str:
        return f"{self.period}: {self.last_number}"


class OrderItem(BaseModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.PROTECT, related_name="order_items"
    )
    product_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64)
    unit = models.CharField(max_length=10)
    quantity = models.DecimalField(max_digits=10, decimal_places=3)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, editable=False)
    notes = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(quantity__gt=0), name="order_items_quantity_positive"
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total_price = round2(self.quantity * self.unit_price)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.total_price})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail; ``changed_by`` is ``None`` for system changes."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    old_status = models.CharField(  # noqa: DJ01
        max_length=20, choices=OrderStatus.choices, null=True, blank=True
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.ForeignKey(
        "accounts.User", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status} -> {self.new_status}"
