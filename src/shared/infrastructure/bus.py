"""Synchronous in-process event bus.

Handlers run inside the publisher's transaction, so a failing handler
rolls back the change that raised the event.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler, Subscription
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def subscribe_all(self, subscriptions: Iterable[Subscription]) -> None:
        for event_class, handler in subscriptions:
            self.subscribe(event_class, handler)

    def handlers_for(self, event_class: Type[DomainEvent]) -> List[IEventHandler]:
        return list(self._handlers.get(event_class, []))

    def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(type(event), []):
            logger.debug(
                "event_bus.dispatch",
                event_name=event.event_name,
                handler=handler.__class__.__name__,
            )
            handler.handle(event)


event_bus = InMemoryEventBus()
