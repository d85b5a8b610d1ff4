"""Django ORM implementation of the Payment repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.core.repositories.outbox import flush_domain_events
from modules.orders.constants import PaymentStatus
from modules.payments.models import Payment
from modules.payments.repositories.interfaces import IPaymentRepository

OUTBOX_TOPIC = "payments"

SETTLED_STATUSES = (
    PaymentStatus.CAPTURED,
    PaymentStatus.PARTIALLY_REFUNDED,
    PaymentStatus.REFUNDED,
)


class PaymentDjangoRepository(IPaymentRepository):
    def _queryset(self) -> QuerySet:
        return Payment.objects.select_related("order", "customer")

    def get_by_id(self, id: str) -> Optional[Payment]:
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Payment]:
        try:
            return Payment.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def latest_for_order(self, order_id: str) -> Optional[Payment]:
        try:
            return self._queryset().filter(order_id=order_id).order_by("-created_at").first()
        except (ValueError, ValidationError):
            return None

    def captured_for_order(self, order_id: str) -> Optional[Payment]:
        return Payment.objects.filter(order_id=order_id, status__in=SETTLED_STATUSES).first()

    def open_for_order(self, order_id: str) -> Optional[Payment]:
        return (
            Payment.objects.select_for_update()
            .filter(
                order_id=order_id,
                status__in=(PaymentStatus.PENDING, PaymentStatus.AUTHORIZED),
            )
            .order_by("-created_at")
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Payment) -> Payment:
        entity.save()
        flush_domain_events(entity, OUTBOX_TOPIC)
        return entity
