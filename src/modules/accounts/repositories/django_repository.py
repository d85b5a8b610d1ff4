"""Django ORM implementations of the account repositories."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet
from django.utils import timezone

from modules.accounts.models import Address, Session, User
from modules.accounts.repositories.interfaces import (
    IAddressRepository,
    ISessionRepository,
    IUserRepository,
)

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    def get_by_id(self, id: str) -> Optional[User]:
        try:
            return User.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_login(self, identifier: str) -> Optional[User]:
        value = identifier.strip().lower()
        return User.objects.filter(Q(username=value) | Q(email=value)).first()

    def username_or_email_taken(self, username: str, email: str) -> bool:
        return User.objects.filter(
            Q(username=username.lower()) | Q(email=email.lower())
        ).exists()

    def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        queryset = User.objects.filter(email=email.lower())
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = User.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: User) -> User:
        entity.save()
        return entity


class SessionDjangoRepository(ISessionRepository):
    def get_by_id(self, id: str) -> Optional[Session]:
        try:
            return Session.objects.select_related("user").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_token(self, token: str) -> Optional[Session]:
        return (
            Session.objects.select_related("user")
            .filter(token_hash=Session.hash_token(token))
            .first()
        )

    def create(self, user: User, token: str, expires_at: datetime, **meta) -> Session:
        return Session.objects.create(
            user=user,
            token_hash=Session.hash_token(token),
            expires_at=expires_at,
            user_agent=(meta.get("user_agent") or "")[:255],
            ip_address=meta.get("ip_address"),
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Session.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Session) -> Session:
        entity.save()
        return entity

    def delete(self, session: Session) -> None:
        session.delete()

    def delete_for_user(self, user_id: str, keep: Session | None = None) -> int:
        queryset = Session.objects.filter(user_id=user_id)
        if keep is not None:
            queryset = queryset.exclude(id=keep.id)
        deleted, _ = queryset.delete()
        return deleted

    def purge_expired(self) -> int:
        deleted, _ = Session.objects.filter(expires_at__lte=timezone.now()).delete()
        return deleted


class AddressDjangoRepository(IAddressRepository):
    def get_by_id(self, id: str) -> Optional[Address]:
        try:
            return Address.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def for_user(self, user_id: str) -> QuerySet:
        return Address.objects.alive().filter(user_id=user_id)

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Address.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Address) -> Address:
        entity.save()
        return entity

    def clear_default(self, user_id: str, exclude_id: str | None = None) -> None:
        queryset = Address.objects.alive().filter(user_id=user_id, is_default=True)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        queryset.update(is_default=False, updated_at=timezone.now())
