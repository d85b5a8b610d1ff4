from __future__ import annotations

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.chat.repositories.django_repository import ChatDjangoRepository
from modules.chat.services import ChatService
from modules.notifications.repositories.django_repository import NotificationDjangoRepository
from modules.notifications.services import NotificationService


def build_chat_service() -> ChatService:
    return ChatService(
        ChatDjangoRepository(),
        UserDjangoRepository(),
        NotificationService(NotificationDjangoRepository()),
    )
