from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.promotions.constants import DiscountType


class DiscountCodeDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    code: str = Field(min_length=3, max_length=40)
    description: str = ""
    type: DiscountType
    value: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    minimum_order: Decimal = Field(default=Decimal("0"), ge=0)
    maximum_discount: Optional[Decimal] = Field(default=None, gt=0)
    usage_limit: int = Field(default=0, ge=0)
    user_limit: int = Field(default=1, ge=0)
    valid_from: datetime
    valid_to: datetime
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def consistent(self) -> Self:
        if self.valid_to <= self.valid_from:
            raise ValueError("valid_to must be after valid_from.")
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("A percentage discount cannot exceed 100.")
        return self


class ValidatePromoDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    code: str = Field(min_length=1)
    order_total: Decimal = Field(ge=0)
