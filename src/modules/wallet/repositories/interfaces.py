from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.wallet.models import Wallet, WalletTransaction


class IWalletRepository(IRepository["Wallet"]):
    @abstractmethod
    def get_for_user(self, user_id: str) -> Optional[Wallet]:
        """The user's wallet or ``None``."""

    @abstractmethod
    def lock_for_user(self, user_id: str) -> Optional[Wallet]:
        """The user's wallet, row-locked."""

    @abstractmethod
    def add_transaction(self, transaction: WalletTransaction) -> WalletTransaction:
        """Append to the ledger."""

    @abstractmethod
    def recent_transactions(self, wallet: Wallet, limit: int):
        """Newest ``limit`` ledger entries."""
