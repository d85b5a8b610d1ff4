"""Catalog use cases: products, categories and the stock ledger.

Stock rules:

- ``in`` adds to ``quantity``.
- ``out`` removes from ``quantity`` and needs enough available stock.
- ``reserved`` adds to ``reserved_quantity`` and needs enough available stock.
- ``released`` removes from ``reserved_quantity`` (never below zero).
- ``adjustment`` sets ``quantity`` to an absolute count.

Every change appends a ``StockMovement``.  For ``reserved``/``released``
the previous/new figures refer to the reserved quantity; for the other
types they refer to the on-hand quantity.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from modules.catalog.constants import MovementType, ReferenceType
from modules.catalog.exceptions import (
    CategoryNotFound,
    DuplicateSku,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
    StockNotFound,
)
from modules.catalog.models import Category, Product, Stock, StockMovement

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.catalog.dtos import (
        CategoryDTO,
        CreateProductDTO,
        RestockDTO,
        StockMovementDTO,
        StockThresholdsDTO,
        UpdateProductDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IProductRepository,
        IStockRepository,
    )

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockLine:
    """A product/quantity pair handed over by orders."""

    product_id: str
    quantity: Decimal


class ProductService:
    def __init__(
        self,
        product_repository: IProductRepository,
        category_repository: ICategoryRepository,
        stock_repository: IStockRepository,
    ) -> None:
        self._products = product_repository
        self._categories = category_repository
        self._stock = stock_repository

    def get_product(self, id: str) -> Product:
        product = self._products.get_by_id(id)
        if not product:
            raise ProductNotFound()
        return product

    def list_products(self, include_inactive: bool = False):
        filters = None if include_inactive else {"is_active": True}
        return self._products.list(filters)

    def _category(self, category_id) -> Optional[Category]:
        if category_id is None:
            return None
        category = self._categories.get_by_id(str(category_id))
        if category is None:
            raise CategoryNotFound()
        return category

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create the product together with its stock row."""
        log = logger.bind(sku=dto.sku)
        if self._products.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise DuplicateSku(f"SKU '{dto.sku}' already registered.")

        product = Product(
            **dto.model_dump(exclude={"category_id", "initial_stock"}),
            category=self._category(dto.category_id),
        )
        product = self._products.save(product)
        self._stock.save(
            Stock(
                product=product,
                quantity=dto.initial_stock,
                last_restocked_at=timezone.now() if dto.initial_stock else None,
            )
        )
        log.info("product.created", product_id=str(product.id))
        return self._products.get_by_id(str(product.id))

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        product = self.get_product(id)
        changes = dto.model_dump(exclude_none=True, exclude={"category_id"})
        for field, value in changes.items():
            setattr(product, field, value)
        if dto.category_id is not None:
            product.category = self._category(dto.category_id)
        if product.min_order_quantity > product.max_order_quantity:
            raise InvalidQuantity("min_order_quantity cannot exceed max_order_quantity.")
        self._products.save(product)
        logger.info("product.updated", product_id=str(id), fields=sorted(changes))
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        product = self.get_product(id)
        product.delete()
        logger.info("product.deleted", product_id=str(id))


class CategoryService:
    def __init__(self, repository: ICategoryRepository) -> None:
        self._repo = repository

    def list_categories(self, include_inactive: bool = False):
        return self._repo.list(None if include_inactive else {"is_active": True})

    def get_category(self, id: str) -> Category:
        category = self._repo.get_by_id(id)
        if not category:
            raise CategoryNotFound()
        return category

    def _unique_slug(self, base: str, exclude_id: str | None = None) -> str:
        slug = base
        suffix = 2
        while self._repo.slug_taken(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    @transaction.atomic
    def create_category(self, dto: CategoryDTO) -> Category:
        category = Category(**dto.model_dump(exclude={"slug"}))
        category.slug = self._unique_slug(slugify(dto.slug or dto.name))
        category = self._repo.save(category)
        logger.info("category.created", category_id=str(category.id), slug=category.slug)
        return category

    @transaction.atomic
    def update_category(self, id: str, data: Dict[str, Any]) -> Category:
        category = self.get_category(id)
        for field, value in data.items():
            if field == "slug":
                value = self._unique_slug(slugify(value), exclude_id=id)
            setattr(category, field, value)
        return self._repo.save(category)


class StockService:
    def __init__(self, stock_repository: IStockRepository) -> None:
        self._stock = stock_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_stock(self):
        return self._stock.list()

    def get_stock(self, product_id: str) -> Stock:
        stock = self._stock.get_for_product(product_id)
        if stock is None:
            raise StockNotFound()
        return stock

    def alerts(self):
        return self._stock.low_stock()

    def movements(self):
        return self._stock.movements()

    # ------------------------------------------------------------------
    # Back-office movements
    # ------------------------------------------------------------------

    @transaction.atomic
    def apply_movement(
        self, dto: StockMovementDTO, performed_by: User | None = None
    ) -> StockMovement:
        locked = self._stock.lock_for_products([str(dto.product_id)])
        stock = locked.get(str(dto.product_id))
        if stock is None:
            raise StockNotFound()
        return self._apply(
            stock,
            dto.type,
            dto.quantity,
            reason=dto.reason,
            reference_type=dto.reference_type,
            reference_id=dto.reference_id,
            performed_by=performed_by,
        )

    @transaction.atomic
    def bulk_update(
        self, dtos: Sequence[StockMovementDTO], performed_by: User | None = None
    ) -> List[StockMovement]:
        """Apply every movement or none of them."""
        locked = self._stock.lock_for_products(str(dto.product_id) for dto in dtos)
        movements = []
        for dto in dtos:
            stock = locked.get(str(dto.product_id))
            if stock is None:
                raise StockNotFound(f"No stock record for product {dto.product_id}.")
            movements.append(
                self._apply(
                    stock,
                    dto.type,
                    dto.quantity,
                    reason=dto.reason,
                    reference_type=dto.reference_type,
                    reference_id=dto.reference_id,
                    performed_by=performed_by,
                )
            )
        logger.info("stock.bulk_updated", movement_count=len(movements))
        return movements

    @transaction.atomic
    def restock(
        self, product_id: str, dto: RestockDTO, performed_by: User | None = None
    ) -> Stock:
        stock = self._stock.lock_for_products([product_id]).get(str(product_id))
        if stock is None:
            raise StockNotFound()
        if dto.batch_number:
            stock.batch_number = dto.batch_number
        stock.last_restocked_at = timezone.now()
        self._apply(
            stock, MovementType.IN, dto.quantity, reason=dto.reason, performed_by=performed_by
        )
        return stock

    @transaction.atomic
    def update_thresholds(self, product_id: str, dto: StockThresholdsDTO) -> Stock:
        stock = self.get_stock(product_id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(stock, field, value)
        self._stock.save(stock)
        logger.info("stock.thresholds_updated", product_id=str(product_id))
        return stock

    # ------------------------------------------------------------------
    # Order-facing helpers
    # ------------------------------------------------------------------

    @transaction.atomic
    def reserve(self, lines: Iterable[StockLine], order_id: str) -> None:
        self._for_order(lines, MovementType.RESERVED, order_id, "Reserved for order")

    @transaction.atomic
    def release(self, lines: Iterable[StockLine], order_id: str) -> None:
        self._for_order(lines, MovementType.RELEASED, order_id, "Released from order")

    @transaction.atomic
    def commit(self, lines: Iterable[StockLine], order_id: str) -> None:
        """Turn a reservation into goods leaving the shop."""
        lines = list(lines)
        locked = self._stock.lock_for_products(line.product_id for line in lines)
        for line in sorted(lines, key=lambda item: str(item.product_id)):
            stock = locked.get(str(line.product_id))
            if stock is None:
                raise StockNotFound(f"No stock record for product {line.product_id}.")
            stock.reserved_quantity = max(stock.reserved_quantity - line.quantity, Decimal("0"))
            self._apply(
                stock,
                MovementType.OUT,
                line.quantity,
                reason="Order delivered",
                reference_type=ReferenceType.ORDER,
                reference_id=str(order_id),
            )

    @transaction.atomic
    def receive(
        self,
        lines: Iterable[StockLine],
        purchase_order_id: str,
        performed_by: User | None = None,
    ) -> None:
        """Book goods delivered against a purchase order into stock."""
        lines = list(lines)
        locked = self._stock.lock_for_products(line.product_id for line in lines)
        received_at = timezone.now()
        for line in sorted(lines, key=lambda item: str(item.product_id)):
            stock = locked.get(str(line.product_id))
            if stock is None:
                raise StockNotFound(f"No stock record for product {line.product_id}.")
            stock.last_restocked_at = received_at
            self._apply(
                stock,
                MovementType.IN,
                line.quantity,
                reason="Purchase order received",
                reference_type=ReferenceType.PURCHASE,
                reference_id=str(purchase_order_id),
                performed_by=performed_by,
            )

    def _for_order(
        self, lines: Iterable[StockLine], type: str, order_id: str, reason: str
    ) -> None:
        lines = list(lines)
        locked = self._stock.lock_for_products(line.product_id for line in lines)
        for line in sorted(lines, key=lambda item: str(item.product_id)):
            stock = locked.get(str(line.product_id))
            if stock is None:
                raise StockNotFound(f"No stock record for product {line.product_id}.")
            self._apply(
                stock,
                type,
                line.quantity,
                reason=reason,
                reference_type=ReferenceType.ORDER,
                reference_id=str(order_id),
            )

    # ------------------------------------------------------------------

    def _apply(
        self,
        stock: Stock,
        type: str,
        quantity: Decimal,
        reason: str = "",
        reference_type: str = ReferenceType.MANUAL,
        reference_id: str = "",
        performed_by: User | None = None,
    ) -> StockMovement:
        log = logger.bind(product_id=str(stock.product_id), movement=type, quantity=str(quantity))
        available = stock.available_quantity

        if type in (MovementType.OUT, MovementType.RESERVED) and quantity > available:
            log.warning("stock.insufficient", available=str(available))
            raise InsufficientStock(
                f"Insufficient stock for {stock.product.name}: "
                f"requested {quantity}, available {available}."
            )
        if type == MovementType.ADJUSTMENT and quantity < stock.reserved_quantity:
            raise InvalidQuantity(
                f"Quantity cannot be set below the reserved {stock.reserved_quantity}."
            )

        if type in (MovementType.RESERVED, MovementType.RELEASED):
            previous = stock.reserved_quantity
            if type == MovementType.RESERVED:
                stock.reserved_quantity = previous + quantity
            else:
                stock.reserved_quantity = max(previous - quantity, Decimal("0"))
            new = stock.reserved_quantity
        else:
            previous = stock.quantity
            if type == MovementType.IN:
                stock.quantity = previous + quantity
            elif type == MovementType.OUT:
                stock.quantity = previous - quantity
            else:
                stock.quantity = quantity
            new = stock.quantity

        self._stock.save(stock)
        movement = self._stock.add_movement(
            StockMovement(
                product_id=stock.product_id,
                type=type,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=new,
                reason=reason,
                reference_type=reference_type,
                reference_id=reference_id,
                performed_by=performed_by,
            )
        )
        log.info("stock.movement_recorded", previous=str(previous), new=str(new))
        return movement
