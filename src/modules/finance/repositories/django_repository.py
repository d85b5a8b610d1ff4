"""Django ORM implementations of the finance repositories."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from modules.finance.constants import ExpenseStatus
from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction
from modules.finance.repositories.interfaces import (
    IExpenseRepository,
    IFinanceAccountRepository,
    IFinanceTransactionRepository,
)


class FinanceAccountDjangoRepository(IFinanceAccountRepository):
    def get_by_id(self, id: str) -> Optional[FinanceAccount]:
        try:
            return FinanceAccount.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[FinanceAccount]:
        try:
            return FinanceAccount.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def lock_many(self, ids: list[str]) -> dict[str, FinanceAccount]:
        accounts = FinanceAccount.objects.select_for_update().filter(id__in=ids).order_by("id")
        return {str(account.id): account for account in accounts}

    def settlement_account(self, type: str) -> Optional[FinanceAccount]:
        return (
            FinanceAccount.objects.select_for_update()
            .filter(type=type, is_active=True)
            .order_by("created_at")
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = FinanceAccount.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: FinanceAccount) -> FinanceAccount:
        entity.save()
        return entity


class FinanceTransactionDjangoRepository(IFinanceTransactionRepository):
    def get_by_id(self, id: str) -> Optional[FinanceTransaction]:
        try:
            return (
                FinanceTransaction.objects.select_related("account", "created_by")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = FinanceTransaction.objects.select_related("account", "created_by")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def for_period(self, start, end) -> QuerySet:
        return FinanceTransaction.objects.filter(created_at__gte=start, created_at__lte=end)

    def save(self, entity: FinanceTransaction) -> FinanceTransaction:
        entity.save()
        return entity


class ExpenseDjangoRepository(IExpenseRepository):
    def get_by_id(self, id: str) -> Optional[FinanceExpense]:
        try:
            return FinanceExpense.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[FinanceExpense]:
        try:
            return FinanceExpense.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = FinanceExpense.objects.select_related("account", "approved_by")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: FinanceExpense) -> FinanceExpense:
        entity.save()
        return entity

    def delete(self, expense: FinanceExpense) -> None:
        expense.delete()

    def past_due(self, today: date) -> QuerySet:
        return FinanceExpense.objects.filter(
            status__in=[ExpenseStatus.PENDING, ExpenseStatus.APPROVED],
            due_date__lt=today,
        )
