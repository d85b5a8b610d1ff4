"""Notification use cases.

Other modules call ``notify_user`` / ``notify_admins`` from their event
handlers; the API exposes the read side.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet

from modules.accounts.models import User
from modules.notifications.constants import TITLE_MAX_LENGTH, Audience, NotificationType
from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.models import Notification

if TYPE_CHECKING:
    from modules.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class NotificationService:
    def __init__(self, repository: INotificationRepository) -> None:
        self._repository = repository

    def notify_user(
        self,
        user: User | str | UUID,
        title: str,
        message: str,
        type: str = NotificationType.SYSTEM,
        link: str = "",
    ) -> Notification:
        notification = Notification(
            audience=Audience.USER,
            type=type,
            title=title[:TITLE_MAX_LENGTH],
            message=message,
            link=link,
        )
        if isinstance(user, User):
            notification.user = user
        else:
            notification.user_id = user
        notification = self._repository.save(notification)
        logger.info(
            "notification.sent",
            user_id=str(notification.user_id),
            notification_type=type,
        )
        return notification

    def notify_admins(
        self, title: str, message: str, type: str = NotificationType.SYSTEM, link: str = ""
    ) -> Notification:
        notification = self._repository.save(
            Notification(
                audience=Audience.ADMIN,
                type=type,
                title=title[:TITLE_MAX_LENGTH],
                message=message,
                link=link,
            )
        )
        logger.info("notification.broadcast", notification_type=type)
        return notification

    def list_for(self, user: User, unread_only: bool = False) -> QuerySet:
        queryset = self._repository.visible_to(user)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset

    def unread_count(self, user: User) -> int:
        return self._repository.visible_to(user).filter(is_read=False).count()

    def _get_visible(self, user: User, id: str) -> Notification:
        try:
            notification = self._repository.visible_to(user).filter(id=id).first()
        except ValueError:
            notification = None
        if notification is None:
            raise NotificationNotFound()
        return notification

    def mark_read(self, user: User, id: str) -> Notification:
        notification = self._get_visible(user, id)
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
        return notification

    def mark_all_read(self, user: User) -> int:
        return self._repository.visible_to(user).filter(is_read=False).update(is_read=True)

    def delete(self, user: User, id: str) -> None:
        self._get_visible(user, id).delete()

    @transaction.atomic
    def clear(self, user: User) -> int:
        """Delete the caller's own notifications; admin broadcasts stay."""
        deleted, _ = self._repository.list({"user": user}).delete()
        logger.info("notification.cleared", user_id=str(user.id), deleted=deleted)
        return deleted
