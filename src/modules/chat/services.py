"""Support chat use cases.

Customers write into their own thread; staff reply into a customer's
thread as ``admin``.  Each message starts read on the sender's side and
unread on the other, and the other side is notified.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.accounts.exceptions import UserNotFound
from modules.chat.constants import NOTIFICATION_NAME_LENGTH, NOTIFICATION_PREVIEW_LENGTH, Sender
from modules.chat.exceptions import ChatAccessDenied, RecipientRequired
from modules.chat.models import ChatMessage
from modules.core.permissions import is_staff_user
from modules.notifications.constants import NotificationType

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.chat.dtos import SendMessageDTO
    from modules.chat.repositories.interfaces import IChatRepository
    from modules.notifications.services import NotificationService

logger = structlog.get_logger(__name__)


@dataclass
class Conversation:
    user_id: str
    user_name: str
    user_email: str
    messages: list[ChatMessage]
    last_message_at: datetime
    unread_count: int


class ChatService:
    def __init__(
        self,
        chat_repository: IChatRepository,
        user_repository: IUserRepository,
        notification_service: NotificationService,
    ) -> None:
        self._messages = chat_repository
        self._users = user_repository
        self._notifications = notification_service

    def check_access(self, viewer: User, user_id: str) -> None:
        if not is_staff_user(viewer) and str(viewer.id) != str(user_id):
            raise ChatAccessDenied()

    @transaction.atomic
    def send(self, sender: User, dto: SendMessageDTO) -> ChatMessage:
        if is_staff_user(sender):
            if dto.user_id is None:
                raise RecipientRequired()
            owner = self._users.get_by_id(str(dto.user_id))
            if owner is None:
                raise UserNotFound()
            side = Sender.ADMIN
        else:
            owner, side = sender, Sender.USER

        message = self._messages.save(
            ChatMessage(
                user=owner,
                user_name=owner.full_name or owner.username,
                user_email=owner.email,
                sender=side,
                text=dto.text,
                attachments=list(dto.attachments),
                read_by_user=side == Sender.USER,
                read_by_admin=side == Sender.ADMIN,
            )
        )

        preview = dto.text[:NOTIFICATION_PREVIEW_LENGTH]
        if side == Sender.USER:
            name = (message.user_name or "Customer")[:NOTIFICATION_NAME_LENGTH]
            self._notifications.notify_admins(
                f"New Message from {name}",
                preview,
                type=NotificationType.CHAT,
                link=f"/admin/chat/{owner.id}",
            )
        else:
            self._notifications.notify_user(
                owner,
                "New Message from Support",
                preview,
                type=NotificationType.CHAT,
                link="/chat",
            )
        logger.info(
            "chat.message_sent",
            thread_user_id=str(owner.id),
            sender=side,
            message_id=str(message.id),
        )
        return message

    def conversations(self) -> list[Conversation]:
        """Every thread, most recently active first."""
        threads: dict[str, Conversation] = {}
        for message in self._messages.list().order_by("created_at"):
            key = str(message.user_id)
            conversation = threads.get(key)
            if conversation is None:
                conversation = threads[key] = Conversation(
                    user_id=key,
                    user_name=message.user_name,
                    user_email=message.user_email,
                    messages=[],
                    last_message_at=message.created_at,
                    unread_count=0,
                )
            conversation.messages.append(message)
            conversation.last_message_at = message.created_at
            if message.sender == Sender.USER and not message.read_by_admin:
                conversation.unread_count += 1
        return sorted(threads.values(), key=lambda c: c.last_message_at, reverse=True)

    def conversation(self, viewer: User, user_id: str) -> list[ChatMessage]:
        self.check_access(viewer, user_id)
        return list(self._messages.thread(user_id))

    def mark_read_by_user(self, viewer: User, user_id: str) -> int:
        self.check_access(viewer, user_id)
        return self._messages.mark_read(user_id, Sender.ADMIN, "read_by_user")

    def mark_read_by_admin(self, user_id: str) -> int:
        return self._messages.mark_read(user_id, Sender.USER, "read_by_admin")

    def unread_count(self, viewer: User) -> int:
        if is_staff_user(viewer):
            return self._messages.list({"sender": Sender.USER, "read_by_admin": False}).count()
        return self._messages.list(
            {"user_id": viewer.id, "sender": Sender.ADMIN, "read_by_user": False}
        ).count()
