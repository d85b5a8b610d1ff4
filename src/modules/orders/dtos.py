"""Order DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modules.accounts.dtos import AddressDTO
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: Decimal = Field(gt=0, decimal_places=3)
    notes: str = ""


class CreateOrderDTO(BaseModel):
    """Checkout payload.

    The delivery address is either a saved ``address_id`` or an inline
    ``delivery_address``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    items: List[OrderItemDTO] = Field(min_length=1)
    address_id: Optional[UUID] = None
    delivery_address: Optional[AddressDTO] = None
    payment_method: PaymentMethod = PaymentMethod.COD
    discount_code: Optional[str] = None
    is_express: bool = False
    driver_tip: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    notes: str = ""
    idempotency_key: Optional[str] = None

    @model_validator(mode="after")
    def check_items_and_address(self) -> Self:
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Each product may appear only once per order.")
        if self.address_id is None and self.delivery_address is None:
            raise ValueError("A delivery address is required.")
        return self


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: OrderStatus
    notes: str = ""
    expected_status: Optional[OrderStatus] = None


class CancelOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    reason: str = ""
    expected_status: Optional[OrderStatus] = None


class UpdatePaymentStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    payment_status: PaymentStatus
    notes: str = ""
