from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.notifications.models import Notification


class INotificationRepository(IRepository["Notification"]):
    @abstractmethod
    def visible_to(self, user: User) -> QuerySet:
        """Notifications addressed to ``user`` (plus admin broadcasts for staff)."""
