"""Payment ledger.

One order may accumulate several payment attempts but at most one is
ever ``captured``.  ``refunds`` is append-only; ``refunded_amount`` is its
running total and never exceeds ``amount``.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import PaymentMethod, PaymentStatus
from shared.domain.events import DomainEventMixin


class Payment(DomainEventMixin, BaseModel):
    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="payments")
    order_number = models.CharField(max_length=20)
    customer = models.ForeignKey(
        "accounts.User", on_delete=models.PROTECT, related_name="payments"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="AED")
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    gateway_transaction_id = models.CharField(max_length=64, blank=True, default="")
    card_brand = models.CharField(max_length=20, blank=True, default="")
    card_last4 = models.CharField(max_length=4, blank=True, default="")
    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    refunds = models.JSONField(default=list, blank=True)
    captured_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="payments_status_idx"),
            models.Index(fields=["order", "status"], name="payments_order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(amount__gt=0), name="payments_amount_positive"),
            models.CheckConstraint(
                check=models.Q(refunded_amount__lte=models.F("amount")),
                name="payments_refund_within_amount",
            ),
        ]

    @property
    def refundable_amount(self) -> Decimal:
        return self.amount - self.refunded_amount

    def __str__(self) -> str:
        return f"{self.order_number} {self.amount} {self.currency} ({self.status})"
