from __future__ import annotations

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.wallet.repositories.django_repository import WalletDjangoRepository
from modules.wallet.services import WalletService


def build_wallet_service() -> WalletService:
    return WalletService(WalletDjangoRepository(), UserDjangoRepository())
