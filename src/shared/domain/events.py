"""Domain event primitives shared by every module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Immutable fact raised by an aggregate.

    Subclasses add their own fields; every extra field needs a default
    because the base fields already have one. ``event_name`` is the class
    name and is what the outbox stores as the event type.
    """

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=_utcnow)
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", type(self).__name__)


class DomainEventMixin:
    """Lets a model collect events until its repository flushes them.

    The pending list lives on the instance only, never in the database.
    """

    def _pending(self) -> list[DomainEvent]:
        return self.__dict__.setdefault("_domain_events", [])

    def add_domain_event(self, event: DomainEvent) -> None:
        self._pending().append(event)

    def clear_domain_events(self) -> None:
        self._pending().clear()

    def pull_domain_events(self) -> list[DomainEvent]:
        """Return the pending events and forget them."""
        events = list(self._pending())
        self.clear_domain_events()
        return events

    @property
    def domain_events(self) -> list[DomainEvent]:
        return list(self._pending())
