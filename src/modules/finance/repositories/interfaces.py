from __future__ import annotations

from abc import abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Optional

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction


class IFinanceAccountRepository(IRepository["FinanceAccount"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[FinanceAccount]:
        """Row-locked account or ``None``."""

    @abstractmethod
    def lock_many(self, ids: list[str]) -> dict[str, FinanceAccount]:
        """Lock the given accounts in id order; keyed by ``str(id)``."""

    @abstractmethod
    def settlement_account(self, type: str) -> Optional[FinanceAccount]:
        """The oldest active account of ``type``, row-locked."""


class IFinanceTransactionRepository(IRepository["FinanceTransaction"]):
    @abstractmethod
    def for_period(self, start, end) -> QuerySet: ...


class IExpenseRepository(IRepository["FinanceExpense"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[FinanceExpense]: ...

    @abstractmethod
    def delete(self, expense: FinanceExpense) -> None: ...

    @abstractmethod
    def past_due(self, today: date) -> QuerySet:
        """Pending or approved expenses whose due date is before ``today``."""
