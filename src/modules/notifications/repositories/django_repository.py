from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet

from modules.core.permissions import is_staff_user
from modules.notifications.constants import Audience
from modules.notifications.models import Notification
from modules.notifications.repositories.interfaces import INotificationRepository


class NotificationDjangoRepository(INotificationRepository):
    def get_by_id(self, id: str) -> Optional[Notification]:
        try:
            return Notification.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Notification.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def visible_to(self, user) -> QuerySet:
        condition = Q(user=user)
        if is_staff_user(user):
            condition |= Q(audience=Audience.ADMIN)
        return Notification.objects.filter(condition)

    def save(self, entity: Notification) -> Notification:
        entity.save()
        return entity
