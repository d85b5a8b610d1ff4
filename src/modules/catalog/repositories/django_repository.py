"""Django ORM implementations of the catalog repositories."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from django.core.exceptions import ValidationError
from django.db.models import ExpressionWrapper, F, QuerySet
from django.db.models import DecimalField as DecimalExpr

from modules.catalog.models import Category, Product, Stock, StockMovement
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IProductRepository,
    IStockRepository,
)


class ProductDjangoRepository(IProductRepository):
    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return (
                Product.objects.alive()
                .select_related("category", "stock")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return Product.objects.alive().filter(sku=sku.strip().upper()).first()

    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        try:
            products = Product.objects.alive().filter(id__in=list(ids))
            return {str(product.id): product for product in products}
        except (ValueError, ValidationError):
            return {}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Product.objects.alive().select_related("category", "stock")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Product) -> Product:
        entity.save()
        return entity


class CategoryDjangoRepository(ICategoryRepository):
    def get_by_id(self, id: str) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        queryset = Category.objects.filter(slug=slug)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Category) -> Category:
        entity.save()
        return entity


def _with_available(queryset: QuerySet) -> QuerySet:
    return queryset.annotate(
        available=ExpressionWrapper(
            F("quantity") - F("reserved_quantity"),
            output_field=DecimalExpr(max_digits=12, decimal_places=3),
        )
    )


class StockDjangoRepository(IStockRepository):
    def get_by_id(self, id: str) -> Optional[Stock]:
        try:
            return Stock.objects.select_related("product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_product(self, product_id: str) -> Optional[Stock]:
        try:
            return Stock.objects.select_related("product").filter(product_id=product_id).first()
        except (ValueError, ValidationError):
            return None

    def lock_for_products(self, product_ids: Iterable[str]) -> Dict[str, Stock]:
        ordered = sorted({str(pid) for pid in product_ids})
        rows = (
            Stock.objects.select_for_update()
            .select_related("product")
            .filter(product_id__in=ordered)
            .order_by("product_id")
        )
        return {str(row.product_id): row for row in rows}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = _with_available(
            Stock.objects.select_related("product").filter(product__deleted_at__isnull=True)
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def low_stock(self) -> QuerySet:
        return (
            self.list()
            .filter(available__lte=F("low_stock_threshold"))
            .order_by("available", "product__name")
        )

    def save(self, entity: Stock) -> Stock:
        entity.save()
        return entity

    def add_movement(self, movement: StockMovement) -> StockMovement:
        movement.save()
        return movement

    def movements(self) -> QuerySet:
        return StockMovement.objects.select_related("product", "performed_by")
