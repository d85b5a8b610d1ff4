"""Back-office ledger: money accounts, their transactions, and supplier expenses.

Transaction amounts are signed: money into an account is positive,
money out is negative.  An account's ``balance`` is kept in step with
the transactions written against it inside the same DB transaction.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.finance.constants import (
    EXPENSE_CATEGORY_CHOICES,
    AccountType,
    ExpenseStatus,
    PaymentTerms,
    TransactionStatus,
    TransactionType,
)


def _money(**kwargs: Any) -> models.DecimalField:
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class FinanceAccount(BaseModel):
    name = models.CharField(max_length=100)
    name_ar = models.CharField(max_length=100, blank=True, default="")
    type = models.CharField(max_length=20, choices=AccountType.choices)
    balance = _money()
    currency = models.CharField(max_length=3, default="AED")
    bank_name = models.CharField(max_length=100, blank=True, default="")
    account_number = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)
    last_reconciled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "finance_accounts"
        ordering = ["name"]
        indexes = [models.Index(fields=["type", "is_active"], name="finance_acct_type_idx")]

    def __str__(self) -> str:
        return f"{self.name} ({self.balance} {self.currency})"


class FinanceTransaction(BaseModel):
    type = models.CharField(max_length=20, choices=TransactionType.choices)
    status = models.CharField(
        max_length=20, choices=TransactionStatus.choices, default=TransactionStatus.COMPLETED
    )
    amount = _money()
    currency = models.CharField(max_length=3, default="AED")
    description = models.CharField(max_length=255)
    category = models.CharField(max_length=50, blank=True, default="")
    reference_type = models.CharField(max_length=20, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")
    account = models.ForeignKey(
        FinanceAccount,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    created_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="finance_transactions",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "finance_transactions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "created_at"], name="finance_txn_type_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="finance_txn_ref_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.amount} {self.currency}"


class FinanceExpense(BaseModel):
    expense_number = models.CharField(max_length=24, unique=True, editable=False)
    category = models.CharField(max_length=30, choices=EXPENSE_CATEGORY_CHOICES)
    description = models.CharField(max_length=255)
    vendor = models.CharField(max_length=150, blank=True, default="")
    gross_amount = _money()
    vat_amount = _money()
    amount = _money()
    currency = models.CharField(max_length=3, default="AED")
    invoice_number = models.CharField(max_length=50, blank=True, default="")
    invoice_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    payment_terms = models.CharField(
        max_length=12, choices=PaymentTerms.choices, default=PaymentTerms.NET_30
    )
    status = models.CharField(
        max_length=12, choices=ExpenseStatus.choices, default=ExpenseStatus.PENDING
    )
    approved_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_expenses",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    account = models.ForeignKey(
        FinanceAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses",
    )
    created_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_expenses",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "finance_expenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "due_date"], name="finance_exp_due_idx"),
            models.Index(fields=["category"], name="finance_exp_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(gross_amount__gt=0), name="finance_exp_gross_positive"
            ),
        ]

    @staticmethod
    def generate_expense_number() -> str:
        return f"EXP-{timezone.now():%Y%m%d}-{secrets.token_hex(3).upper()}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.expense_number:
            self.expense_number = self.generate_expense_number()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.expense_number} {self.amount} ({self.status})"
