"""Discount codes.

``code`` is stored upper-case.  ``usage_limit`` of 0 means unlimited and
``user_limit`` caps how many of a customer's orders may carry the code.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.promotions.constants import DiscountType


class DiscountCode(BaseModel):
    code = models.CharField(max_length=40, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    type = models.CharField(max_length=20, choices=DiscountType.choices)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    minimum_order = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    maximum_discount = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, default=None
    )
    usage_limit = models.PositiveIntegerField(default=0)
    usage_count = models.PositiveIntegerField(default=0)
    user_limit = models.PositiveIntegerField(default=1)
    valid_from = models.DateTimeField()
    valid_to = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "discount_codes"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(check=models.Q(value__gt=0), name="discount_codes_value_positive"),
        ]

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code} ({self.type} {self.value})"
