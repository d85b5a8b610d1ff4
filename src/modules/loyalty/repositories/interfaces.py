from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.loyalty.models import LoyaltyAccount, LoyaltyTier, LoyaltyTransaction


class ILoyaltyRepository(IRepository["LoyaltyAccount"]):
    @abstractmethod
    def get_for_user(self, user_id: str) -> Optional[LoyaltyAccount]:
        """The user's account or ``None``."""

    @abstractmethod
    def lock_for_user(self, user_id: str) -> Optional[LoyaltyAccount]:
        """The user's account, row-locked."""

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[LoyaltyAccount]: ...

    @abstractmethod
    def code_taken(self, code: str) -> bool: ...

    @abstractmethod
    def add_transaction(self, transaction: LoyaltyTransaction) -> LoyaltyTransaction: ...

    @abstractmethod
    def recent_transactions(self, account: LoyaltyAccount, limit: int): ...

    @abstractmethod
    def tiers(self) -> list[LoyaltyTier]:
        """All tiers, lowest first."""

    @abstractmethod
    def create_tier(self, **fields) -> LoyaltyTier: ...
