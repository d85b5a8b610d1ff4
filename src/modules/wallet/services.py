"""Wallet use cases.

Every balance change locks the wallet row and appends a ledger entry
carrying the resulting balance.  A wallet is opened on first use and
starts with the shop's welcome bonus.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from django.db import IntegrityError, transaction

from modules.accounts.exceptions import UserNotFound
from modules.core.models import ShopSettings
from modules.core.money import ZERO, round2, to_decimal
from modules.wallet.constants import (
    RECENT_TRANSACTIONS,
    WELCOME_BONUS_DESCRIPTION,
    WalletTransactionType,
)
from modules.wallet.exceptions import InsufficientBalance
from modules.wallet.models import Wallet, WalletTransaction

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.wallet.dtos import CreditDTO, DeductDTO, TopUpDTO
    from modules.wallet.repositories.interfaces import IWalletRepository

logger = structlog.get_logger(__name__)


class WalletService:
    def __init__(
        self, wallet_repository: IWalletRepository, user_repository: IUserRepository
    ) -> None:
        self._wallets = wallet_repository
        self._users = user_repository

    def _locked(self, user_id: str) -> Wallet:
        wallet = self._wallets.lock_for_user(user_id)
        if wallet is not None:
            return wallet
        try:
            with transaction.atomic():
                return self._open(user_id)
        except IntegrityError:
            # Opened concurrently by another request.
            return self._wallets.lock_for_user(user_id)

    def _open(self, user_id: str) -> Wallet:
        bonus = round2(ShopSettings.load().welcome_bonus)
        wallet = self._wallets.save(Wallet(user_id=user_id, balance=bonus))
        if bonus > ZERO:
            self._wallets.add_transaction(
                WalletTransaction(
                    wallet=wallet,
                    type=WalletTransactionType.CREDIT,
                    amount=bonus,
                    balance_after=bonus,
                    description=WELCOME_BONUS_DESCRIPTION,
                    description_ar="مكافأة ترحيبية! ابدأ التسوق معنا",
                )
            )
        logger.info("wallet.opened", user_id=str(user_id), welcome_bonus=str(bonus))
        return wallet

    def _post(
        self,
        wallet: Wallet,
        type: str,
        amount: Decimal,
        description: str,
        description_ar: str = "",
        reference: str = "",
    ) -> WalletTransaction:
        amount = round2(amount)
        if type == WalletTransactionType.DEBIT:
            if amount > wallet.balance:
                logger.info(
                    "wallet.insufficient_balance",
                    user_id=str(wallet.user_id),
                    balance=str(wallet.balance),
                    amount=str(amount),
                )
                raise InsufficientBalance()
            wallet.balance = round2(wallet.balance - amount)
        else:
            wallet.balance = round2(wallet.balance + amount)
        self._wallets.save(wallet)
        entry = self._wallets.add_transaction(
            WalletTransaction(
                wallet=wallet,
                type=type,
                amount=amount,
                balance_after=wallet.balance,
                description=description,
                description_ar=description_ar,
                reference=reference,
            )
        )
        logger.info(
            "wallet.transaction_recorded",
            user_id=str(wallet.user_id),
            type=type,
            amount=str(amount),
            balance=str(wallet.balance),
        )
        return entry

    # ------------------------------------------------------------------

    @transaction.atomic
    def get_wallet(self, user_id: str) -> tuple[Wallet, list[WalletTransaction]]:
        wallet = self._wallets.get_for_user(user_id) or self._locked(user_id)
        return wallet, list(self._wallets.recent_transactions(wallet, RECENT_TRANSACTIONS))

    @transaction.atomic
    def top_up(self, user_id: str, dto: TopUpDTO) -> Wallet:
        wallet = self._locked(user_id)
        self._post(
            wallet, WalletTransactionType.TOPUP, dto.amount, f"Top up via {dto.payment_method}"
        )
        return wallet

    @transaction.atomic
    def deduct(self, user_id: str, dto: DeductDTO) -> Wallet:
        wallet = self._locked(user_id)
        self._post(
            wallet,
            WalletTransactionType.DEBIT,
            dto.amount,
            dto.description,
            description_ar=dto.description_ar,
            reference=dto.reference,
        )
        return wallet

    @transaction.atomic
    def credit(self, dto: CreditDTO) -> Wallet:
        if self._users.get_by_id(str(dto.user_id)) is None:
            raise UserNotFound()
        return self.credit_user(
            str(dto.user_id),
            dto.amount,
            dto.type,
            dto.description,
            description_ar=dto.description_ar,
            reference=dto.reference,
        )

    @transaction.atomic
    def credit_user(
        self,
        user_id: str,
        amount: Decimal,
        type: str,
        description: str,
        description_ar: str = "",
        reference: str = "",
    ) -> Wallet:
        wallet = self._locked(user_id)
        self._post(
            wallet, type, amount, description, description_ar=description_ar, reference=reference
        )
        return wallet

    @transaction.atomic
    def cashback(self, user_id: str, order_total: Decimal, order_number: str) -> Decimal:
        """Credit ``cashback_percentage`` of a delivered order; returns the amount."""
        amount = round2(
            to_decimal(order_total) * ShopSettings.load().cashback_percentage / Decimal("100")
        )
        if amount <= ZERO:
            return ZERO
        self.credit_user(
            user_id,
            amount,
            WalletTransactionType.CASHBACK,
            f"Cashback for order {order_number}",
            reference=order_number,
        )
        return amount
