"""Catalog DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.catalog.constants import (
    DEFAULT_MAX_ORDER_QUANTITY,
    DEFAULT_MIN_ORDER_QUANTITY,
    MovementType,
    ProductUnit,
    ReferenceType,
)


class CreateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    sku: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    name_ar: str = ""
    description: str = ""
    category_id: Optional[UUID] = None
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    cost_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    unit: ProductUnit = ProductUnit.KG
    min_order_quantity: Decimal = Field(default=DEFAULT_MIN_ORDER_QUANTITY, gt=0)
    max_order_quantity: Decimal = Field(default=DEFAULT_MAX_ORDER_QUANTITY, gt=0)
    is_active: bool = True
    is_featured: bool = False
    tags: List[str] = Field(default_factory=list)
    initial_stock: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("sku")
    @classmethod
    def upper_sku(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def quantity_bounds(self) -> Self:
        if self.min_order_quantity > self.max_order_quantity:
            raise ValueError("min_order_quantity cannot exceed max_order_quantity.")
        return self


class UpdateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    name_ar: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    discount: Optional[Decimal] = Field(default=None, ge=0, le=100)
    unit: Optional[ProductUnit] = None
    min_order_quantity: Optional[Decimal] = Field(default=None, gt=0)
    max_order_quantity: Optional[Decimal] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    tags: Optional[List[str]] = None


class CategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    name_ar: str = ""
    slug: Optional[str] = None
    description: str = ""
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class StockMovementDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    product_id: UUID
    type: MovementType
    quantity: Decimal = Field(ge=0, decimal_places=3)
    reason: str = ""
    reference_type: ReferenceType = ReferenceType.MANUAL
    reference_id: str = ""

    @model_validator(mode="after")
    def positive_unless_adjustment(self) -> Self:
        if self.type != MovementType.ADJUSTMENT and self.quantity <= 0:
            raise ValueError("Quantity must be greater than zero.")
        return self


class BulkStockMovementDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    movements: List[StockMovementDTO] = Field(min_length=1)


class RestockDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    quantity: Decimal = Field(gt=0, decimal_places=3)
    batch_number: str = ""
    reason: str = "Restock"


class StockThresholdsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    low_stock_threshold: Optional[Decimal] = Field(default=None, ge=0)
    reorder_point: Optional[Decimal] = Field(default=None, ge=0)
    reorder_quantity: Optional[Decimal] = Field(default=None, ge=0)
