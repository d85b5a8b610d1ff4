"""Support chat: one thread per customer, messages from either side."""

from __future__ import annotations

from django.db import models

from modules.chat.constants import Sender
from modules.core.models import BaseModel


class ChatMessage(BaseModel):
    user = models.ForeignKey(
        "accounts.User", on_delete=models.CASCADE, related_name="chat_messages"
    )
    user_name = models.CharField(max_length=150)
    user_email = models.EmailField(blank=True, default="")
    sender = models.CharField(max_length=10, choices=Sender.choices)
    text = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    read_by_admin = models.BooleanField(default=False)
    read_by_user = models.BooleanField(default=False)

    class Meta:
        db_table = "chat_messages"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="chat_user_created_idx"),
            models.Index(fields=["sender", "read_by_admin"], name="chat_admin_unread_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.sender}@{self.user_id}: {self.text[:30]}"
