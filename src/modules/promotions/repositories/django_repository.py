from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import F, QuerySet

from modules.promotions.models import DiscountCode
from modules.promotions.repositories.interfaces import IDiscountCodeRepository


class DiscountCodeDjangoRepository(IDiscountCodeRepository):
    def get_by_id(self, id: str) -> Optional[DiscountCode]:
        try:
            return DiscountCode.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_code(self, code: str) -> Optional[DiscountCode]:
        return DiscountCode.objects.filter(code=code.strip().upper()).first()

    def user_usage_count(self, code: str, user_id: str) -> int:
        from modules.orders.constants import OrderStatus
        from modules.orders.models import Order

        return (
            Order.objects.alive()
            .filter(customer_id=user_id, discount_code=code.strip().upper())
            .exclude(status=OrderStatus.CANCELLED)
            .count()
        )

    def increment_usage(self, discount_code: DiscountCode) -> None:
        DiscountCode.objects.filter(pk=discount_code.pk).update(usage_count=F("usage_count") + 1)
        discount_code.refresh_from_db(fields=["usage_count"])

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = DiscountCode.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: DiscountCode) -> DiscountCode:
        entity.save()
        return entity
