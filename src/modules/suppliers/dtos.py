"""Supplier and purchase order DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from modules.suppliers.constants import (
    PurchaseOrderStatus,
    SupplierPaymentTerms,
    SupplierStatus,
)

Currency = Literal["AED", "USD", "EUR"]


class SupplierAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    emirate: str = ""
    country: str = "UAE"
    postal_code: str = ""


class ContactDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    position: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    is_primary: bool = False


class SupplierDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    name_ar: str = ""
    email: EmailStr
    phone: str = Field(min_length=5, max_length=20)
    website: str = ""
    tax_number: str = ""
    address: SupplierAddressDTO
    contacts: List[ContactDTO] = Field(default_factory=list)
    payment_terms: SupplierPaymentTerms = SupplierPaymentTerms.NET_30
    currency: Currency = "AED"
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    categories: List[str] = Field(default_factory=list)
    notes: str = ""


class UpdateSupplierDTO(BaseModel):
    """Partial update; contacts have their own endpoints."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name_ar: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=5, max_length=20)
    website: Optional[str] = None
    tax_number: Optional[str] = None
    address: Optional[SupplierAddressDTO] = None
    payment_terms: Optional[SupplierPaymentTerms] = None
    currency: Optional[Currency] = None
    credit_limit: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    categories: Optional[List[str]] = None
    notes: Optional[str] = None


class SupplierStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SupplierStatus


class SupplierProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    product_id: UUID
    supplier_sku: str = ""
    unit_cost: Decimal = Field(gt=0, decimal_places=2)
    minimum_order_quantity: Decimal = Field(default=Decimal("1"), gt=0, decimal_places=3)
    lead_time_days: int = Field(default=7, ge=0)
    is_preferred: bool = False
    notes: str = ""


class UpdateSupplierProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    supplier_sku: Optional[str] = None
    unit_cost: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    minimum_order_quantity: Optional[Decimal] = Field(default=None, gt=0, decimal_places=3)
    lead_time_days: Optional[int] = Field(default=None, ge=0)
    is_preferred: Optional[bool] = None
    notes: Optional[str] = None


class PurchaseOrderItemDTO(BaseModel):
    """``unit_cost`` falls back to the supplier's listed cost, then the product's."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: Decimal = Field(gt=0, decimal_places=3)
    unit_cost: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    notes: str = ""


class CreatePurchaseOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    supplier_id: UUID
    items: List[PurchaseOrderItemDTO] = Field(min_length=1)
    expected_delivery_date: date
    delivery_address: str = Field(min_length=1)
    delivery_notes: str = ""
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    internal_notes: str = ""

    @model_validator(mode="after")
    def unique_products(self) -> Self:
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Each product may appear only once per purchase order.")
        return self


class PurchaseOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: PurchaseOrderStatus
    notes: str = ""


class ReceiveItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: UUID
    quantity: Decimal = Field(gt=0, decimal_places=3)


class ReceivePurchaseOrderDTO(BaseModel):
    """Goods delivered; ``account_id`` pays for them on delivery."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    items: List[ReceiveItemDTO] = Field(min_length=1)
    account_id: Optional[UUID] = None
    notes: str = ""


class PaySupplierDTO(BaseModel):
    """Settle received goods; ``amount`` defaults to everything outstanding."""

    model_config = ConfigDict(frozen=True)

    account_id: UUID
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
