"""Finance use cases: accounts, the transaction ledger and expenses.

Every balance change goes through ``_record`` so an account never moves
without a matching transaction row.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction
from django.utils import timezone
from uuid6 import uuid7

from modules.core.models import ShopSettings
from modules.core.money import ZERO, round2, to_decimal
from modules.finance.constants import (
    EXPENSE_CATEGORIES,
    METHOD_ACCOUNT_TYPE,
    PAYMENT_TERM_DAYS,
    ExpenseStatus,
    ReferenceType,
    TransactionType,
)
from modules.finance.exceptions import (
    ExpenseNotFound,
    FinanceAccountNotFound,
    InactiveAccount,
    InsufficientFunds,
    InvalidExpenseState,
    TransactionNotFound,
)
from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.finance.dtos import (
        AccountDTO,
        ExpenseDTO,
        ReconcileDTO,
        TransferDTO,
    )
    from modules.finance.repositories.interfaces import (
        IExpenseRepository,
        IFinanceAccountRepository,
        IFinanceTransactionRepository,
    )

logger = structlog.get_logger(__name__)

CLOSED_EXPENSE_STATES = (ExpenseStatus.PAID, ExpenseStatus.CANCELLED)


class FinanceService:
    def __init__(
        self,
        account_repository: IFinanceAccountRepository,
        transaction_repository: IFinanceTransactionRepository,
        expense_repository: IExpenseRepository,
    ) -> None:
        self._accounts = account_repository
        self._transactions = transaction_repository
        self._expenses = expense_repository

    def _record(
        self,
        account: Optional[FinanceAccount],
        type: str,
        amount: Decimal,
        description: str,
        user: User | None = None,
        **fields: Any,
    ) -> FinanceTransaction:
        amount = round2(amount)
        if account is not None:
            account.balance = round2(account.balance + amount)
            self._accounts.save(account)
        entry = self._transactions.save(
            FinanceTransaction(
                type=type,
                amount=amount,
                description=description,
                account=account,
                created_by=user,
                **fields,
            )
        )
        logger.info(
            "finance.transaction_recorded",
            transaction_id=str(entry.id),
            type=type,
            amount=str(amount),
            account_id=str(account.id) if account else None,
        )
        return entry

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def list_accounts(self):
        return self._accounts.list()

    def get_account(self, id: str) -> FinanceAccount:
        account = self._accounts.get_by_id(id)
        if account is None:
            raise FinanceAccountNotFound()
        return account

    @transaction.atomic
    def create_account(self, dto: AccountDTO, user: User | None = None) -> FinanceAccount:
        account = self._accounts.save(
            FinanceAccount(**dto.model_dump(exclude={"balance"}), balance=ZERO)
        )
        if dto.balance:
            self._record(
                account,
                TransactionType.ADJUSTMENT,
                dto.balance,
                "Opening balance",
                user,
                reference_type=ReferenceType.MANUAL,
                reference_id=str(account.id),
            )
        logger.info("finance.account_created", account_id=str(account.id), type=account.type)
        return account

    @transaction.atomic
    def update_account(self, id: str, data: Dict[str, Any]) -> FinanceAccount:
        account = self._accounts.get_for_update(id)
        if account is None:
            raise FinanceAccountNotFound()
        for field, value in data.items():
            setattr(account, field, value)
        return self._accounts.save(account)

    @transaction.atomic
    def transfer(
        self, dto: TransferDTO, user: User | None = None
    ) -> tuple[FinanceAccount, FinanceAccount]:
        source_id, target_id = str(dto.from_account_id), str(dto.to_account_id)
        locked = self._accounts.lock_many([source_id, target_id])
        source, target = locked.get(source_id), locked.get(target_id)
        if source is None or target is None:
            raise FinanceAccountNotFound()
        if not (source.is_active and target.is_active):
            raise InactiveAccount()
        amount = round2(dto.amount)
        if source.balance < amount:
            raise InsufficientFunds()

        reference = uuid7().hex
        notes = dto.notes
        self._record(
            source,
            TransactionType.ADJUSTMENT,
            -amount,
            f"Transfer to {target.name}",
            user,
            reference_type=ReferenceType.TRANSFER,
            reference_id=reference,
            notes=notes,
        )
        self._record(
            target,
            TransactionType.ADJUSTMENT,
            amount,
            f"Transfer from {source.name}",
            user,
            reference_type=ReferenceType.TRANSFER,
            reference_id=reference,
            notes=notes,
        )
        logger.info(
            "finance.transfer_completed",
            from_account=source_id,
            to_account=target_id,
            amount=str(amount),
        )
        return source, target

    @transaction.atomic
    def reconcile(
        self, id: str, dto: ReconcileDTO, user: User | None = None
    ) -> tuple[FinanceAccount, Decimal]:
        """Bring the balance to the bank statement; returns the adjustment made."""
        account = self._accounts.get_for_update(id)
        if account is None:
            raise FinanceAccountNotFound()
        difference = round2(dto.statement_balance - account.balance)
        if difference != ZERO:
            self._record(
                account,
                TransactionType.ADJUSTMENT,
                difference,
                "Reconciliation adjustment",
                user,
                reference_type=ReferenceType.RECONCILIATION,
                reference_id=str(account.id),
                notes=dto.notes,
            )
        if dto.statement_date:
            account.last_reconciled_at = timezone.make_aware(
                datetime.combine(dto.statement_date, time.max)
            )
        else:
            account.last_reconciled_at = timezone.now()
        self._accounts.save(account)
        logger.info(
            "finance.account_reconciled", account_id=str(account.id), difference=str(difference)
        )
        return account, difference

    def list_transactions(self):
        return self._transactions.list()

    def get_transaction(self, id: str) -> FinanceTransaction:
        entry = self._transactions.get_by_id(id)
        if entry is None:
            raise TransactionNotFound()
        return entry

    # ------------------------------------------------------------------
    # Payment settlement
    # ------------------------------------------------------------------

    @transaction.atomic
    def record_sale(
        self, payment_id: str, order_number: str, amount: Decimal, method: str
    ) -> FinanceTransaction:
        account_type = METHOD_ACCOUNT_TYPE.get(method)
        account = self._accounts.settlement_account(account_type) if account_type else None
        if account is None:
            logger.warning("finance.no_settlement_account", method=method, payment_id=payment_id)
        return self._record(
            account,
            TransactionType.SALE,
            to_decimal(amount),
            f"Payment for order {order_number}",
            category="sales",
            reference_type=ReferenceType.PAYMENT,
            reference_id=payment_id,
        )

    @transaction.atomic
    def record_refund(
        self, payment_id: str, order_number: str, amount: Decimal, method: str, reason: str = ""
    ) -> FinanceTransaction:
        account_type = METHOD_ACCOUNT_TYPE.get(method)
        account = self._accounts.settlement_account(account_type) if account_type else None
        return self._record(
            account,
            TransactionType.REFUND,
            -to_decimal(amount),
            f"Refund for order {order_number}",
            category="refunds",
            reference_type=ReferenceType.PAYMENT,
            reference_id=payment_id,
            notes=reason,
        )

    def _purchase_account(self, account_id: Optional[str]) -> Optional[FinanceAccount]:
        if not account_id:
            return None
        account = self._accounts.get_for_update(account_id)
        if account is None:
            raise FinanceAccountNotFound()
        if not account.is_active:
            raise InactiveAccount()
        return account

    @transaction.atomic
    def record_purchase(
        self,
        purchase_order_id: str,
        order_number: str,
        supplier_name: str,
        amount: Decimal,
        account_id: Optional[str] = None,
        user: User | None = None,
    ) -> FinanceTransaction:
        """Post goods received from a supplier.

        Without an account the purchase is booked on credit and only
        shows up as a payable until it is paid.
        """
        return self._record(
            self._purchase_account(account_id),
            TransactionType.PURCHASE,
            -to_decimal(amount),
            f"Purchase order {order_number} from {supplier_name}",
            user,
            category="inventory",
            reference_type=ReferenceType.PURCHASE_ORDER,
            reference_id=purchase_order_id,
        )

    @transaction.atomic
    def record_supplier_payment(
        self,
        purchase_order_id: str,
        order_number: str,
        supplier_name: str,
        amount: Decimal,
        account_id: str,
        user: User | None = None,
    ) -> FinanceTransaction:
        return self._record(
            self._purchase_account(account_id),
            TransactionType.PAYOUT,
            -to_decimal(amount),
            f"Payment to {supplier_name} for {order_number}",
            user,
            category="inventory",
            reference_type=ReferenceType.PURCHASE_ORDER,
            reference_id=purchase_order_id,
        )

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    @staticmethod
    def categories() -> list[dict]:
        return [
            {"code": code, "name": name, "name_ar": name_ar, "function": function, "gl_code": gl}
            for code, name, name_ar, function, gl in EXPENSE_CATEGORIES
        ]

    def list_expenses(self):
        return self._expenses.list()

    def get_expense(self, id: str) -> FinanceExpense:
        expense = self._expenses.get_by_id(id)
        if expense is None:
            raise ExpenseNotFound()
        return expense

    def _locked_expense(self, id: str) -> FinanceExpense:
        expense = self._expenses.get_for_update(id)
        if expense is None:
            raise ExpenseNotFound()
        return expense

    @staticmethod
    def _apply_amounts(expense: FinanceExpense, vat_amount: Optional[Decimal]) -> None:
        if vat_amount is None:
            vat_amount = expense.gross_amount * ShopSettings.load().vat_rate
        expense.gross_amount = round2(expense.gross_amount)
        expense.vat_amount = round2(vat_amount)
        expense.amount = round2(expense.gross_amount + expense.vat_amount)

    @transaction.atomic
    def create_expense(self, dto: ExpenseDTO, user: User | None = None) -> FinanceExpense:
        if dto.account_id and self._accounts.get_by_id(str(dto.account_id)) is None:
            raise FinanceAccountNotFound()
        expense = FinanceExpense(
            **dto.model_dump(exclude={"vat_amount", "account_id"}),
            account_id=dto.account_id,
            created_by=user,
        )
        if expense.due_date is None:
            issued = dto.invoice_date or timezone.localdate()
            expense.due_date = issued + timedelta(days=PAYMENT_TERM_DAYS[dto.payment_terms])
        self._apply_amounts(expense, dto.vat_amount)
        self._expenses.save(expense)
        logger.info(
            "finance.expense_created",
            expense_id=str(expense.id),
            expense_number=expense.expense_number,
            amount=str(expense.amount),
        )
        return expense

    @transaction.atomic
    def update_expense(self, id: str, data: Dict[str, Any]) -> FinanceExpense:
        expense = self._locked_expense(id)
        if expense.status in CLOSED_EXPENSE_STATES:
            raise InvalidExpenseState(f"Cannot edit a {expense.status} expense")
        data = dict(data)
        vat_amount = data.pop("vat_amount", None)
        for field, value in data.items():
            setattr(expense, field, value)
        if vat_amount is None and "gross_amount" not in data:
            vat_amount = expense.vat_amount
        self._apply_amounts(expense, vat_amount)
        return self._expenses.save(expense)

    @transaction.atomic
    def delete_expense(self, id: str) -> None:
        expense = self._locked_expense(id)
        if expense.status == ExpenseStatus.PAID:
            raise InvalidExpenseState("Cannot delete a paid expense")
        self._expenses.delete(expense)
        logger.info("finance.expense_deleted", expense_id=id)

    @transaction.atomic
    def approve_expense(self, id: str, user: User | None = None) -> FinanceExpense:
        expense = self._locked_expense(id)
        if expense.status != ExpenseStatus.PENDING:
            raise InvalidExpenseState("Only pending expenses can be approved")
        expense.status = ExpenseStatus.APPROVED
        expense.approved_by = user
        expense.approved_at = timezone.now()
        self._expenses.save(expense)
        logger.info("finance.expense_approved", expense_id=id)
        return expense

    @transaction.atomic
    def reject_expense(self, id: str, reason: str, user: User | None = None) -> FinanceExpense:
        expense = self._locked_expense(id)
        if expense.status in CLOSED_EXPENSE_STATES:
            raise InvalidExpenseState(f"Cannot reject a {expense.status} expense")
        expense.status = ExpenseStatus.CANCELLED
        note = f"Rejected: {reason}"
        expense.notes = f"{expense.notes}\n{note}".strip()
        self._expenses.save(expense)
        logger.info("finance.expense_rejected", expense_id=id)
        return expense

    @transaction.atomic
    def pay_expense(self, id: str, account_id: str, user: User | None = None) -> FinanceExpense:
        expense = self._locked_expense(id)
        if expense.status in CLOSED_EXPENSE_STATES:
            raise InvalidExpenseState(f"Cannot pay a {expense.status} expense")
        account = self._accounts.get_for_update(account_id)
        if account is None:
            raise FinanceAccountNotFound()
        if not account.is_active:
            raise InactiveAccount()

        expense.status = ExpenseStatus.PAID
        expense.paid_at = timezone.now()
        expense.account = account
        self._expenses.save(expense)
        self._record(
            account,
            TransactionType.EXPENSE,
            -expense.amount,
            f"{expense.expense_number}: {expense.description}",
            user,
            category=expense.category,
            reference_type=ReferenceType.EXPENSE,
            reference_id=str(expense.id),
        )
        logger.info(
            "finance.expense_paid",
            expense_id=id,
            account_id=str(account.id),
            amount=str(expense.amount),
        )
        return expense

    def pending_approvals(self):
        return self._expenses.list(
            {"status": ExpenseStatus.PENDING, "approved_by__isnull": True}
        ).order_by("due_date", "created_at")

    @transaction.atomic
    def mark_overdue(self, today=None) -> int:
        today = today or timezone.localdate()
        updated = self._expenses.past_due(today).update(
            status=ExpenseStatus.OVERDUE, updated_at=timezone.now()
        )
        logger.info("finance.expenses_marked_overdue", count=updated)
        return updated
