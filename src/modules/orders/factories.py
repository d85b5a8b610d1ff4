"""Wire ``OrderService`` with its Django repositories.

Delivery and payments drive orders through the same service, so the
wiring lives here rather than in the views.
"""

from __future__ import annotations

from modules.accounts.repositories.django_repository import AddressDjangoRepository
from modules.catalog.repositories.django_repository import (
    ProductDjangoRepository,
    StockDjangoRepository,
)
from modules.catalog.services import StockService
from modules.delivery.repositories.django_repository import DeliveryZoneDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.promotions.repositories.django_repository import DiscountCodeDjangoRepository
from modules.promotions.services import PromotionService


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        zone_repository=DeliveryZoneDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        stock_service=StockService(StockDjangoRepository()),
        promotion_service=PromotionService(DiscountCodeDjangoRepository()),
    )
