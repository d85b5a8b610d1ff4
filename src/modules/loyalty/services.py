"""Loyalty use cases.

Points are whole numbers.  ``points`` is the spendable balance and
``total_earned`` the lifetime sum of earned and bonus points, which is
what decides the tier.  Redeemed points turn into wallet credit at the
shop's ``loyalty_point_value``.
"""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.accounts.exceptions import UserNotFound
from modules.core.models import ShopSettings
from modules.core.money import round2, to_decimal
from modules.loyalty.constants import (
    DEFAULT_TIERS,
    LIFETIME_TYPES,
    RECENT_TRANSACTIONS,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    LoyaltyTransactionType,
)
from modules.loyalty.exceptions import (
    InsufficientPoints,
    InvalidReferralCode,
    OwnReferralCode,
    ReferralAlreadyUsed,
)
from modules.loyalty.models import LoyaltyAccount, LoyaltyTier, LoyaltyTransaction
from modules.wallet.constants import WalletTransactionType

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.loyalty.dtos import EarnPointsDTO, RedeemPointsDTO
    from modules.loyalty.repositories.interfaces import ILoyaltyRepository
    from modules.wallet.services import WalletService

logger = structlog.get_logger(__name__)


def generate_referral_code() -> str:
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))


def tier_for(total_earned: int, tiers: list[LoyaltyTier]) -> tuple[LoyaltyTier, Optional[LoyaltyTier]]:
    """Return ``(current, next)`` for a lifetime points total."""
    current, upcoming = tiers[0], None
    for index, tier in enumerate(tiers):
        if total_earned >= tier.min_points:
            current = tier
            upcoming = tiers[index + 1] if index + 1 < len(tiers) else None
    return current, upcoming


@dataclass(frozen=True)
class LoyaltySummary:
    account: LoyaltyAccount
    current_tier: LoyaltyTier
    next_tier: Optional[LoyaltyTier]
    points_to_next_tier: int
    transactions: list[LoyaltyTransaction]


class LoyaltyService:
    def __init__(
        self,
        loyalty_repository: ILoyaltyRepository,
        user_repository: IUserRepository,
        wallet_service: WalletService,
    ) -> None:
        self._accounts = loyalty_repository
        self._users = user_repository
        self._wallets = wallet_service

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def tiers(self) -> list[LoyaltyTier]:
        tiers = self._accounts.tiers()
        if tiers:
            return tiers
        for definition in DEFAULT_TIERS:
            self._accounts.create_tier(**definition)
        logger.info("loyalty.tiers_seeded", count=len(DEFAULT_TIERS))
        return self._accounts.tiers()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def _new_code(self) -> str:
        code = generate_referral_code()
        while self._accounts.code_taken(code):
            code = generate_referral_code()
        return code

    def _locked(self, user_id: str) -> LoyaltyAccount:
        account = self._accounts.lock_for_user(user_id)
        if account is not None:
            return account
        try:
            with transaction.atomic():
                account = self._accounts.save(
                    LoyaltyAccount(user_id=user_id, referral_code=self._new_code())
                )
                logger.info("loyalty.account_opened", user_id=str(user_id))
                return account
        except IntegrityError:
            return self._accounts.lock_for_user(user_id)

    def _post(
        self,
        account: LoyaltyAccount,
        type: str,
        points: int,
        description: str,
        order_id: str | None = None,
    ) -> LoyaltyTransaction:
        if type in (LoyaltyTransactionType.REDEEM, LoyaltyTransactionType.EXPIRE):
            if points > account.points:
                raise InsufficientPoints()
            account.points -= points
            signed = -points
        else:
            account.points += points
            signed = points
            if type in LIFETIME_TYPES:
                account.total_earned += points
        self._accounts.save(account)
        entry = self._accounts.add_transaction(
            LoyaltyTransaction(
                account=account,
                type=type,
                points=signed,
                description=description,
                order_id=order_id,
            )
        )
        logger.info(
            "loyalty.points_posted",
            user_id=str(account.user_id),
            type=type,
            points=signed,
            balance=account.points,
        )
        return entry

    @transaction.atomic
    def summary(self, user_id: str) -> LoyaltySummary:
        account = self._accounts.get_for_user(user_id) or self._locked(user_id)
        current, upcoming = tier_for(account.total_earned, self.tiers())
        return LoyaltySummary(
            account=account,
            current_tier=current,
            next_tier=upcoming,
            points_to_next_tier=(upcoming.min_points - account.total_earned) if upcoming else 0,
            transactions=list(self._accounts.recent_transactions(account, RECENT_TRANSACTIONS)),
        )

    @transaction.atomic
    def earn(self, dto: EarnPointsDTO) -> LoyaltyAccount:
        if self._users.get_by_id(str(dto.user_id)) is None:
            raise UserNotFound()
        account = self._locked(str(dto.user_id))
        self._post(
            account,
            LoyaltyTransactionType.EARN,
            dto.points,
            dto.description,
            order_id=str(dto.order_id) if dto.order_id else None,
        )
        return account

    @transaction.atomic
    def redeem(self, user_id: str, dto: RedeemPointsDTO) -> tuple[LoyaltyAccount, Decimal]:
        """Spend points; returns the account and the AED value credited to the wallet."""
        account = self._locked(user_id)
        entry = self._post(account, LoyaltyTransactionType.REDEEM, dto.points, dto.description)
        value = round2(Decimal(dto.points) * ShopSettings.load().loyalty_point_value)
        if value > 0:
            self._wallets.credit_user(
                user_id,
                value,
                WalletTransactionType.CREDIT,
                f"Redeemed {dto.points} loyalty points",
                reference=str(entry.id),
            )
        return account, value

    @transaction.atomic
    def apply_referral(self, user_id: str, code: str) -> tuple[LoyaltyAccount, int]:
        """Link the caller to a referrer; both get the referral bonus."""
        referrer = self._accounts.get_by_code(code)
        if referrer is None:
            raise InvalidReferralCode()
        if str(referrer.user_id) == str(user_id):
            raise OwnReferralCode()

        # Lock both accounts in user id order.
        ids = sorted([str(user_id), str(referrer.user_id)])
        locked = {account_user: self._locked(account_user) for account_user in ids}
        account, referrer = locked[str(user_id)], locked[str(referrer.user_id)]
        if account.referred_by_id is not None:
            raise ReferralAlreadyUsed()

        bonus = ShopSettings.load().referral_bonus_points
        account.referred_by_id = referrer.user_id
        self._post(account, LoyaltyTransactionType.BONUS, bonus, "Referral bonus")
        self._post(referrer, LoyaltyTransactionType.BONUS, bonus, "Referral reward")
        logger.info(
            "loyalty.referral_applied",
            user_id=str(user_id),
            referrer_id=str(referrer.user_id),
            bonus=bonus,
        )
        return account, bonus

    @transaction.atomic
    def award_order_points(
        self, user_id: str, order_id: str, order_total: Decimal, order_number: str
    ) -> int:
        """Earn points for a delivered order at the customer's tier multiplier."""
        account = self._locked(user_id)
        current, _ = tier_for(account.total_earned, self.tiers())
        points = math.floor(
            to_decimal(order_total)
            * ShopSettings.load().loyalty_points_per_aed
            * current.multiplier
        )
        if points <= 0:
            return 0
        self._post(
            account,
            LoyaltyTransactionType.EARN,
            points,
            f"Points earned for order {order_number}",
            order_id=order_id,
        )
        return points
