"""Account DTOs (pydantic v2, immutable).

- ``RegisterUserDTO``: sign-up payload with UAE mobile and password rules.
- ``LoginDTO``: username-or-email plus password.
- ``ChangePasswordDTO``: current and new password.
- ``AdminResetPasswordDTO``: a new password set by an admin.
- ``UpdateUserDTO``: partial profile / admin update.
- ``AddressDTO``: delivery address input.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator

from modules.accounts.constants import Emirate, UserRole
from modules.core.validators import is_valid_uae_mobile, normalize_mobile, password_problems


def _check_password(value: str) -> str:
    problems = password_problems(value)
    if problems:
        raise ValueError(" ".join(problems))
    return value


def _check_mobile(value: str) -> str:
    if not is_valid_uae_mobile(value):
        raise ValueError("Mobile must be a UAE number, e.g. +971 50 123 4567.")
    return normalize_mobile(value)


class RegisterUserDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    username: str
    email: EmailStr
    password: str
    first_name: str
    family_name: str = ""
    mobile: str
    emirate: Optional[Emirate] = None
    role: UserRole = UserRole.CUSTOMER

    @field_validator("username")
    @classmethod
    def username_shape(cls, v: str) -> str:
        if len(v) < 3 or not v.replace("_", "").replace(".", "").isalnum():
            raise ValueError(
                "Username must be at least 3 characters of letters, digits, '.' or '_'."
            )
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("mobile")
    @classmethod
    def uae_mobile(cls, v: str) -> str:
        return _check_mobile(v)


class LoginDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Username and password are required.")
        return v


class ChangePasswordDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def must_differ(self) -> Self:
        if self.current_password == self.new_password:
            raise ValueError("New password must differ from the current one.")
        return self


class AdminResetPasswordDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password(v)


class UpdateUserDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    emirate: Optional[Emirate] = None
    preferred_language: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None

    @field_validator("mobile")
    @classmethod
    def uae_mobile(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_mobile(v)


class AddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    label: str = "Home"
    full_name: str
    mobile: str
    emirate: Emirate
    area: str
    street: str
    building: str
    floor: str = ""
    apartment: str = ""
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    is_default: bool = False

    @field_validator("mobile")
    @classmethod
    def uae_mobile(cls, v: str) -> str:
        return _check_mobile(v)

    @model_validator(mode="after")
    def coordinates_in_range(self) -> Self:
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90.")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180.")
        return self
