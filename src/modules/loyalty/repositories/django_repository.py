from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from modules.loyalty.models import LoyaltyAccount, LoyaltyTier, LoyaltyTransaction
from modules.loyalty.repositories.interfaces import ILoyaltyRepository


class LoyaltyDjangoRepository(ILoyaltyRepository):
    def get_by_id(self, id: str) -> Optional[LoyaltyAccount]:
        try:
            return LoyaltyAccount.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_user(self, user_id: str) -> Optional[LoyaltyAccount]:
        try:
            return LoyaltyAccount.objects.filter(user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def lock_for_user(self, user_id: str) -> Optional[LoyaltyAccount]:
        try:
            return LoyaltyAccount.objects.select_for_update().filter(user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_code(self, code: str) -> Optional[LoyaltyAccount]:
        return LoyaltyAccount.objects.filter(referral_code=code.upper()).first()

    def code_taken(self, code: str) -> bool:
        return LoyaltyAccount.objects.filter(referral_code=code).exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = LoyaltyAccount.objects.select_related("user")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: LoyaltyAccount) -> LoyaltyAccount:
        entity.save()
        return entity

    def add_transaction(self, transaction: LoyaltyTransaction) -> LoyaltyTransaction:
        transaction.save()
        return transaction

    def recent_transactions(self, account: LoyaltyAccount, limit: int):
        return account.transactions.order_by("-created_at")[:limit]

    def tiers(self) -> list[LoyaltyTier]:
        return list(LoyaltyTier.objects.order_by("sort_order", "min_points"))

    def create_tier(self, **fields) -> LoyaltyTier:
        tier, _ = LoyaltyTier.objects.get_or_create(name=fields.pop("name"), defaults=fields)
        return tier
