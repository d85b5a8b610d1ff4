from __future__ import annotations

from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from modules.chat.models import ChatMessage
from modules.chat.repositories.interfaces import IChatRepository


class ChatDjangoRepository(IChatRepository):
    def get_by_id(self, id: str) -> Optional[ChatMessage]:
        try:
            return ChatMessage.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = ChatMessage.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: ChatMessage) -> ChatMessage:
        entity.save()
        return entity

    def thread(self, user_id: str) -> QuerySet:
        return ChatMessage.objects.filter(user_id=user_id).order_by("created_at")

    def mark_read(self, user_id: str, sender: str, flag: str) -> int:
        return ChatMessage.objects.filter(user_id=user_id, sender=sender, **{flag: False}).update(
            **{flag: True}
        )
