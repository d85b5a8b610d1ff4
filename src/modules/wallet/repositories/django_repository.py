from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from modules.wallet.models import Wallet, WalletTransaction
from modules.wallet.repositories.interfaces import IWalletRepository


class WalletDjangoRepository(IWalletRepository):
    def get_by_id(self, id: str) -> Optional[Wallet]:
        try:
            return Wallet.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_user(self, user_id: str) -> Optional[Wallet]:
        try:
            return Wallet.objects.filter(user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def lock_for_user(self, user_id: str) -> Optional[Wallet]:
        try:
            return Wallet.objects.select_for_update().filter(user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Wallet.objects.select_related("user")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Wallet) -> Wallet:
        entity.save()
        return entity

    def add_transaction(self, transaction: WalletTransaction) -> WalletTransaction:
        transaction.save()
        return transaction

    def recent_transactions(self, wallet: Wallet, limit: int):
        return wallet.transactions.order_by("-created_at")[:limit]
