from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from modules.loyalty.constants import REFERRAL_CODE_LENGTH


class EarnPointsDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: UUID
    points: int = Field(gt=0)
    order_id: Optional[UUID] = None
    description: str = Field(min_length=1, max_length=255)


class RedeemPointsDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    points: int = Field(gt=0)
    description: str = Field(default="Points redeemed", max_length=255)


class ReferralDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    code: str = Field(min_length=REFERRAL_CODE_LENGTH, max_length=REFERRAL_CODE_LENGTH)
