from modules.core.exceptions import DomainError


class InsufficientBalance(DomainError):
    default_detail = "Insufficient balance"
    code = "insufficient_balance"
