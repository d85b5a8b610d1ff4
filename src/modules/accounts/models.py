"""User, Session and Address models.

Accounts are a standalone table rather than Django's auth user: the
storefront and back-office share one login with a ``role`` column, and
bearer sessions live in ``sessions`` with an explicit expiry.

- Usernames and emails are stored lower-cased and are unique.
- Passwords are hashed with Django's configured ``PASSWORD_HASHERS``.
- Only a SHA-256 digest of each session token is stored.
- A user has at most one default address.
"""

from __future__ import annotations

import hashlib

import structlog
from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone

from modules.accounts.constants import BACK_OFFICE_ROLES, Emirate, UserRole
from modules.core.models import BaseModel, SoftDeleteModel

logger = structlog.get_logger(__name__)


class User(BaseModel):
    username = models.CharField(max_length=150, unique=True)
    email = models.EmailField(max_length=254, unique=True)
    mobile = models.CharField(max_length=20, blank=True, default="")
    first_name = models.CharField(max_length=100)
    family_name = models.CharField(max_length=100, blank=True, default="")
    password = models.CharField(max_length=128)
    role = models.CharField(
        max_length=20, choices=UserRole.choices, default=UserRole.CUSTOMER
    )
    emirate = models.CharField(max_length=32, choices=Emirate.choices, blank=True, default="")
    preferred_language = models.CharField(max_length=5, default="en")
    is_active = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    last_login_at = models.DateTimeField(null=True, blank=True)

    # DRF checks these on ``request.user``
    is_authenticated = True
    is_anonymous = False

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
            models.Index(fields=["is_active"], name="users_active_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.family_name}".strip()

    @property
    def is_back_office(self) -> bool:
        return self.role in BACK_OFFICE_ROLES

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def save(self, *args, **kwargs) -> None:
        self.username = self.username.strip().lower()
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Session(BaseModel):
    """Bearer session.  ``token_hash`` is ``sha256(token)``."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sessions")
    token_hash = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField(db_index=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    class Meta:
        db_table = "sessions"
        ordering = ["-created_at"]

    @staticmethod
    def hash_token(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()

    def __str__(self) -> str:
        return f"Session({self.user_id}, expires {self.expires_at:%Y-%m-%d %H:%M})"


class Address(SoftDeleteModel):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="addresses")
    label = models.CharField(max_length=50, default="Home")
    full_name = models.CharField(max_length=200)
    mobile = models.CharField(max_length=20)
    emirate = models.CharField(max_length=32, choices=Emirate.choices)
    area = models.CharField(max_length=100)
    street = models.CharField(max_length=200)
    building = models.CharField(max_length=100)
    floor = models.CharField(max_length=20, blank=True, default="")
    apartment = models.CharField(max_length=20, blank=True, default="")
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_default", "-created_at"]

    def as_snapshot(self) -> dict:
        """Plain dict copied onto orders so later edits do not rewrite history."""
        return {
            "label": self.label,
            "full_name": self.full_name,
            "mobile": self.mobile,
            "emirate": self.emirate,
            "area": self.area,
            "street": self.street,
            "building": self.building,
            "floor": self.floor,
            "apartment": self.apartment,
            "latitude": str(self.latitude) if self.latitude is not None else None,
            "longitude": str(self.longitude) if self.longitude is not None else None,
        }

    def __str__(self) -> str:
        return f"{self.label}: {self.area}, {self.emirate}"
