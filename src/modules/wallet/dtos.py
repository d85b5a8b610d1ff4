from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import PaymentMethod
from modules.wallet.constants import STAFF_CREDIT_TYPES, WalletTransactionType


class TopUpDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(gt=0, decimal_places=2)
    payment_method: PaymentMethod = PaymentMethod.CARD


class DeductDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(gt=0, decimal_places=2)
    description: str = Field(min_length=1, max_length=255)
    description_ar: str = ""
    reference: str = ""


class CreditDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    type: WalletTransactionType = WalletTransactionType.CREDIT
    description: str = Field(min_length=1, max_length=255)
    description_ar: str = ""
    reference: str = ""

    @field_validator("type")
    @classmethod
    def credit_only(cls, v: WalletTransactionType) -> WalletTransactionType:
        if v not in STAFF_CREDIT_TYPES:
            raise ValueError("type must be one of credit, refund, cashback, topup.")
        return v
