"""Order repository contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Lock the order row (``SELECT ... FOR UPDATE``) and return it."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Live order with ``order_number``."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Order created with this ``Idempotency-Key``."""

    @abstractmethod
    def add_items(self, order: Order, items: list[dict]) -> None:
        """Persist line items for a freshly created order."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: str | None = None,
        changed_by: User | None = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Append to the order's status history."""
