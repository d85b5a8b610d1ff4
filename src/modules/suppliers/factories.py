from __future__ import annotations

from modules.catalog.repositories.django_repository import (
    ProductDjangoRepository,
    StockDjangoRepository,
)
from modules.catalog.services import StockService
from modules.suppliers.repositories.django_repository import (
    PurchaseOrderDjangoRepository,
    SupplierDjangoRepository,
)
from modules.suppliers.services import PurchaseOrderService, SupplierService


def build_supplier_service() -> SupplierService:
    return SupplierService(SupplierDjangoRepository(), ProductDjangoRepository())


def build_purchase_order_service() -> PurchaseOrderService:
    return PurchaseOrderService(
        purchase_order_repository=PurchaseOrderDjangoRepository(),
        supplier_repository=SupplierDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        stock_service=StockService(StockDjangoRepository()),
    )
