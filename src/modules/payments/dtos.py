"""Payment DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modules.orders.constants import PaymentMethod


class CardDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    number: str = Field(min_length=12, max_length=23)
    expiry: str = Field(min_length=5, max_length=5)
    cvv: str = Field(min_length=3, max_length=4)
    holder_name: str = ""


class ProcessPaymentDTO(BaseModel):
    """Pay for an order; ``amount`` defaults to the order total."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    method: PaymentMethod
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    card: Optional[CardDTO] = None

    @model_validator(mode="after")
    def card_required(self) -> Self:
        if self.method == PaymentMethod.CARD and self.card is None:
            raise ValueError("Card details are required for card payments.")
        return self


class RefundDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(gt=0, decimal_places=2)
    reason: str = Field(min_length=1, max_length=255)
