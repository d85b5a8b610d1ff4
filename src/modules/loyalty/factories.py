from __future__ import annotations

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.loyalty.repositories.django_repository import LoyaltyDjangoRepository
from modules.loyalty.services import LoyaltyService
from modules.wallet.factories import build_wallet_service


def build_loyalty_service() -> LoyaltyService:
    return LoyaltyService(
        LoyaltyDjangoRepository(), UserDjangoRepository(), build_wallet_service()
    )
