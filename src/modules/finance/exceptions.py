from modules.core.exceptions import DomainError, NotFoundError


class FinanceAccountNotFound(NotFoundError):
    default_detail = "Account not found"


class ExpenseNotFound(NotFoundError):
    default_detail = "Expense not found"


class InsufficientFunds(DomainError):
    default_detail = "Insufficient balance in source account"
    code = "insufficient_funds"


class InvalidExpenseState(DomainError):
    default_detail = "Expense cannot be changed in its current status"
    code = "invalid_expense_state"


class InactiveAccount(DomainError):
    default_detail = "Account is inactive"
    code = "inactive_account"


class TransactionNotFound(NotFoundError):
    default_detail = "Transaction not found"
