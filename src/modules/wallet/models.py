"""Customer wallet: a non-negative balance and its transaction ledger."""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.wallet.constants import WalletTransactionType


class Wallet(BaseModel):
    user = models.OneToOneField("accounts.User", on_delete=models.CASCADE, related_name="wallet")
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=3, default="AED")

    class Meta:
        db_table = "wallets"
        constraints = [
            models.CheckConstraint(check=models.Q(balance__gte=0), name="wallets_balance_non_negative"),
        ]

    def __str__(self) -> str:
        return f"Wallet({self.user_id}: {self.balance})"


class WalletTransaction(BaseModel):
    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name="transactions")
    type = models.CharField(max_length=20, choices=WalletTransactionType.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255)
    description_ar = models.CharField(max_length=255, blank=True, default="")
    reference = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "wallet_transactions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["wallet", "-created_at"], name="wallet_txn_wallet_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.amount}"
