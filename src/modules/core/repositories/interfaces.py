"""Generic repository contract.

Services depend on these abstractions; the Django ORM implementations
live next to each module's models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from django.db import models

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base contract for an aggregate repository of ``T``."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Return the entity or ``None`` (also for malformed ids)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """Return a queryset narrowed by Django look-ups."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist the entity and flush its pending domain events."""
