from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.promotions.models import DiscountCode


class IDiscountCodeRepository(IRepository["DiscountCode"]):
    @abstractmethod
    def get_by_code(self, code: str) -> Optional[DiscountCode]:
        """Case-insensitive lookup."""

    @abstractmethod
    def user_usage_count(self, code: str, user_id: str) -> int:
        """Number of the user's non-cancelled orders that used ``code``."""

    @abstractmethod
    def increment_usage(self, discount_code: DiscountCode) -> None:
        """Atomically bump ``usage_count``."""
