"""Flush aggregate domain events into the outbox and the in-process bus."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

import structlog
from django.core.serializers.json import DjangoJSONEncoder

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent, DomainEventMixin
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


def event_payload(event: DomainEvent) -> Dict[str, Any]:
    """JSON-safe dict of the event fields (UUIDs, Decimals and datetimes as strings)."""
    return json.loads(json.dumps(asdict(event), cls=DjangoJSONEncoder))


def flush_domain_events(entity: DomainEventMixin, topic: str) -> int:
    """Record the pending events of ``entity``, then dispatch them.

    Runs inside the caller's transaction: the outbox rows and any handler
    side effects commit or roll back with the aggregate.
    """
    events = entity.pull_domain_events()
    if not events:
        return 0
    OutboxEvent.objects.bulk_create(
        [
            OutboxEvent(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event_payload(event),
                topic=topic,
            )
            for event in events
        ]
    )
    for event in events:
        event_bus.publish(event)
    logger.info(
        "outbox.events_recorded",
        topic=topic,
        event_types=[event.event_name for event in events],
    )
    return len(events)
