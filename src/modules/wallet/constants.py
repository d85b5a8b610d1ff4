from django.db import models


class WalletTransactionType(models.TextChoices):
    CREDIT = "credit", "Credit"
    DEBIT = "debit", "Debit"
    REFUND = "refund", "Refund"
    TOPUP = "topup", "Top up"
    CASHBACK = "cashback", "Cashback"


# Types staff may grant through the credit endpoint.
STAFF_CREDIT_TYPES = (
    WalletTransactionType.CREDIT,
    WalletTransactionType.REFUND,
    WalletTransactionType.CASHBACK,
    WalletTransactionType.TOPUP,
)

RECENT_TRANSACTIONS = 50
WELCOME_BONUS_DESCRIPTION = "Welcome bonus! Start shopping with us"
