"""Event bus contracts.

Each module declares its reactions as a ``SUBSCRIPTIONS`` table of
``(event class, handler)`` pairs in its ``handlers`` module and registers
it from ``AppConfig.ready``.
"""

from __future__ import annotations

from typing import Generic, Iterable, Protocol, Tuple, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    def handle(self, event: E) -> None: ...


Subscription = Tuple[Type[DomainEvent], IEventHandler]


class IEventBus(Protocol):
    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...

    def subscribe_all(self, subscriptions: Iterable[Subscription]) -> None: ...
