"""Payment repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.payments.models import Payment


class IPaymentRepository(IRepository["Payment"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Payment]:
        """Row-locked payment."""

    @abstractmethod
    def latest_for_order(self, order_id: str) -> Optional[Payment]:
        """Most recent payment of an order."""

    @abstractmethod
    def captured_for_order(self, order_id: str) -> Optional[Payment]:
        """The order's captured (or partly refunded) payment, if any."""

    @abstractmethod
    def open_for_order(self, order_id: str) -> Optional[Payment]:
        """The order's pending or authorized payment, row-locked."""
