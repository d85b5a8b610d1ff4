"""Delivery DTOs (pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.accounts.constants import Emirate
from modules.delivery.constants import TrackingStatus


class DeliveryZoneDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    name_ar: str = ""
    emirate: Emirate
    areas: List[str] = Field(default_factory=list)
    delivery_fee: Decimal = Field(default=Decimal("15.00"), ge=0, decimal_places=2)
    minimum_order: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    estimated_minutes: int = Field(default=120, gt=0)
    express_enabled: bool = False
    express_fee: Decimal = Field(default=Decimal("25.00"), ge=0, decimal_places=2)
    express_hours: int = Field(default=1, gt=0)
    is_active: bool = True

    @field_validator("areas")
    @classmethod
    def strip_areas(cls, v: List[str]) -> List[str]:
        return [area.strip() for area in v if area.strip()]


class CheckAvailabilityDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    emirate: str = Field(min_length=1)
    area: Optional[str] = None
    order_total: Decimal = Field(default=Decimal("0"), ge=0)


class AssignDriverDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    driver_id: str
    estimated_arrival: Optional[datetime] = None


class LocationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    timestamp: Optional[datetime] = None


class TrackingStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: TrackingStatus
    notes: str = ""
    location: Optional[LocationDTO] = None


class DeliveryProofDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    signature: str = ""
    photo: str = ""
    notes: str = ""
