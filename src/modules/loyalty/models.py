"""Loyalty programme: tiers, per-customer point accounts and their ledger."""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.loyalty.constants import REFERRAL_CODE_LENGTH, LoyaltyTransactionType


class LoyaltyTier(BaseModel):
    name = models.CharField(max_length=50, unique=True)
    name_ar = models.CharField(max_length=50, blank=True, default="")
    min_points = models.PositiveIntegerField(default=0)
    multiplier = models.DecimalField(max_digits=4, decimal_places=2, default=Decimal("1"))
    benefits = models.JSONField(default=list, blank=True)
    icon = models.CharField(max_length=8, blank=True, default="")
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        db_table = "loyalty_tiers"
        ordering = ["sort_order", "min_points"]

    def __str__(self) -> str:
        return self.name


class LoyaltyAccount(BaseModel):
    user = models.OneToOneField("accounts.User", on_delete=models.CASCADE, related_name="loyalty")
    points = models.PositiveIntegerField(default=0)
    total_earned = models.PositiveIntegerField(default=0)
    referral_code = models.CharField(max_length=REFERRAL_CODE_LENGTH, unique=True)
    referred_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="referrals",
    )

    class Meta:
        db_table = "loyalty_accounts"

    def __str__(self) -> str:
        return f"Loyalty({self.user_id}: {self.points})"


class LoyaltyTransaction(BaseModel):
    account = models.ForeignKey(
        LoyaltyAccount, on_delete=models.CASCADE, related_name="transactions"
    )
    type = models.CharField(max_length=10, choices=LoyaltyTransactionType.choices)
    # Signed: redemptions and expiries are negative.
    points = models.IntegerField()
    description = models.CharField(max_length=255)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
    )

    class Meta:
        db_table = "loyalty_transactions"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["account", "created_at"], name="loyalty_txn_account_idx")]
