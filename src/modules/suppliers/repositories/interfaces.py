"""Supplier and purchase order repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, Optional

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.suppliers.models import PurchaseOrder, Supplier, SupplierProduct


class ISupplierRepository(IRepository["Supplier"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Supplier]:
        """Lock the live supplier row and return it."""

    @abstractmethod
    def delete(self, supplier: Supplier) -> None:
        """Soft-delete the supplier."""

    @abstractmethod
    def has_open_orders(self, supplier: Supplier) -> bool:
        """``True`` while a purchase order is neither received nor cancelled."""

    @abstractmethod
    def offers(self, supplier_id: str) -> QuerySet:
        """Products listed by the supplier."""

    @abstractmethod
    def get_offer(self, id: str) -> Optional[SupplierProduct]:
        """One supplier product by its own id."""

    @abstractmethod
    def offers_for_products(
        self, supplier_id: str, product_ids: Iterable[str]
    ) -> dict[str, SupplierProduct]:
        """The supplier's listings for ``product_ids``, keyed by product id."""

    @abstractmethod
    def save_offer(self, offer: SupplierProduct) -> SupplierProduct:
        """Insert or update a supplier product."""

    @abstractmethod
    def delete_offer(self, offer: SupplierProduct) -> None:
        """Remove a supplier product."""


class IPurchaseOrderRepository(IRepository["PurchaseOrder"]):
    @abstractmethod
    def get_for_update(self, id: str) -> Optional[PurchaseOrder]:
        """Lock the purchase order row and return it."""

    @abstractmethod
    def add_items(self, purchase_order: PurchaseOrder, items: list[dict]) -> None:
        """Persist line items for a freshly created purchase order."""

    @abstractmethod
    def delete(self, purchase_order: PurchaseOrder) -> None:
        """Remove the purchase order and its items."""
