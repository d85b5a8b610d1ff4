"""Catalog repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Product, Stock, StockMovement


class IProductRepository(IRepository["Product"]):
    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Live product with ``sku`` (case-insensitive)."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        """Live products keyed by ``str(id)``."""


class ICategoryRepository(IRepository["Category"]):
    @abstractmethod
    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        """``True`` when another category uses ``slug``."""


class IStockRepository(IRepository["Stock"]):
    @abstractmethod
    def get_for_product(self, product_id: str) -> Optional[Stock]:
        """Stock row of one product."""

    @abstractmethod
    def lock_for_products(self, product_ids: Iterable[str]) -> Dict[str, Stock]:
        """``SELECT ... FOR UPDATE`` stock rows in product-id order."""

    @abstractmethod
    def low_stock(self) -> QuerySet:
        """Rows whose available quantity is at or below the threshold."""

    @abstractmethod
    def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append to the movement ledger."""

    @abstractmethod
    def movements(self) -> QuerySet:
        """The movement ledger, newest first."""
