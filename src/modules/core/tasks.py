"""Background tasks of the core module."""

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent

logger = structlog.get_logger(__name__)

RELAY_BATCH_SIZE = 100
MAX_RETRIES = 5


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = RELAY_BATCH_SIZE) -> dict:
    """Hand pending outbox events to the broker and mark them published.

    Failed events are retried until ``MAX_RETRIES``.
    """
    published = failed = 0
    with transaction.atomic():
        pending = list(
            OutboxEvent.objects.select_for_update()
            .filter(
                status__in=[EventStatus.PENDING, EventStatus.FAILED],
                retry_count__lt=MAX_RETRIES,
            )
            .order_by("created_at", "id")[:batch_size]
        )
        for event in pending:
            try:
                logger.info(
                    "outbox.relay",
                    event_type=event.event_type,
                    aggregate_id=event.aggregate_id,
                    topic=event.topic,
                )
                event.mark_as_published()
                published += 1
            except Exception as exc:  # noqa: BLE001 - recorded on the row
                event.mark_as_failed(str(exc))
                failed += 1
    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
