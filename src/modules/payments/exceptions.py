from modules.core.exceptions import DomainError, NotFoundError


class PaymentNotFound(NotFoundError):
    default_detail = "Payment not found"


class PaymentAlreadyCaptured(DomainError):
    default_detail = "Payment already processed for this order"
    code = "payment_already_captured"


class PaymentDeclined(DomainError):
    default_detail = "Payment declined. Please try another card."
    code = "payment_declined"


class InvalidPaymentState(DomainError):
    default_detail = "Payment cannot be changed in its current status."
    code = "invalid_payment_state"


class RefundExceedsBalance(DomainError):
    default_detail = "Refund exceeds the refundable amount."
    code = "refund_exceeds_balance"


class RefundFailed(DomainError):
    default_detail = "Refund failed. Please try again later."
    code = "refund_failed"
