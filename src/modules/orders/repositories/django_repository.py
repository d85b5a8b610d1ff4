"""Django ORM implementation of the Order repository.

``save`` flushes the aggregate's domain events into the outbox and onto
the in-process bus inside the caller's transaction.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.core.repositories.outbox import flush_domain_events
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    def _queryset(self) -> QuerySet:
        return (
            Order.objects.alive()
            .select_related("customer", "delivery_zone")
            .prefetch_related("items", "status_history")
        )

    def get_by_id(self, id: str) -> Optional[Order]:
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return (
                Order.objects.alive()
                .select_for_update()
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return self._queryset().filter(order_number=order_number.strip().upper()).first()

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return self._queryset().filter(idempotency_key=key).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Order.objects.alive().select_related("customer").prefetch_related("items")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        flush_domain_events(entity, OUTBOX_TOPIC)
        return entity

    def add_items(self, order: Order, items: list[dict]) -> None:
        for data in items:
            OrderItem(order=order, **data).save()

    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: str | None = None,
        changed_by=None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history
