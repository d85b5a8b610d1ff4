"""Django ORM implementations of the supplier repositories."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from modules.core.repositories.outbox import flush_domain_events
from modules.suppliers.constants import CLOSED_STATES
from modules.suppliers.models import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierProduct,
)
from modules.suppliers.repositories.interfaces import (
    IPurchaseOrderRepository,
    ISupplierRepository,
)

OUTBOX_TOPIC = "suppliers"


class SupplierDjangoRepository(ISupplierRepository):
    def get_by_id(self, id: str) -> Optional[Supplier]:
        try:
            return Supplier.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Supplier]:
        try:
            return Supplier.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Supplier.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Supplier) -> Supplier:
        entity.save()
        return entity

    def delete(self, supplier: Supplier) -> None:
        supplier.delete()

    def has_open_orders(self, supplier: Supplier) -> bool:
        return supplier.purchase_orders.exclude(status__in=CLOSED_STATES).exists()

    def offers(self, supplier_id: str) -> QuerySet:
        return SupplierProduct.objects.select_related("product").filter(supplier_id=supplier_id)

    def get_offer(self, id: str) -> Optional[SupplierProduct]:
        try:
            return (
                SupplierProduct.objects.select_related("product", "supplier")
                .filter(id=id, supplier__deleted_at__isnull=True)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def offers_for_products(
        self, supplier_id: str, product_ids: Iterable[str]
    ) -> dict[str, SupplierProduct]:
        offers = SupplierProduct.objects.filter(
            supplier_id=supplier_id, product_id__in=list(product_ids)
        )
        return {str(offer.product_id): offer for offer in offers}

    def save_offer(self, offer: SupplierProduct) -> SupplierProduct:
        offer.save()
        return offer

    def delete_offer(self, offer: SupplierProduct) -> None:
        offer.delete()


class PurchaseOrderDjangoRepository(IPurchaseOrderRepository):
    def get_by_id(self, id: str) -> Optional[PurchaseOrder]:
        try:
            return (
                PurchaseOrder.objects.select_related("supplier")
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[PurchaseOrder]:
        try:
            return PurchaseOrder.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = PurchaseOrder.objects.select_related("supplier").prefetch_related("items")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: PurchaseOrder) -> PurchaseOrder:
        entity.save()
        flush_domain_events(entity, OUTBOX_TOPIC)
        return entity

    def add_items(self, purchase_order: PurchaseOrder, items: list[dict]) -> None:
        for data in items:
            PurchaseOrderItem(purchase_order=purchase_order, **data).save()

    def delete(self, purchase_order: PurchaseOrder) -> None:
        purchase_order.delete()
