from __future__ import annotations

from modules.finance.repositories.django_repository import (
    ExpenseDjangoRepository,
    FinanceAccountDjangoRepository,
    FinanceTransactionDjangoRepository,
)
from modules.finance.services import FinanceService


def build_finance_service() -> FinanceService:
    return FinanceService(
        FinanceAccountDjangoRepository(),
        FinanceTransactionDjangoRepository(),
        ExpenseDjangoRepository(),
    )
