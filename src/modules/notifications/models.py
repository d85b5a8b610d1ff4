from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.notifications.constants import Audience, NotificationType


class Notification(BaseModel):
    """In-app message for one user or for every back-office user.

    Rows with ``audience=admin`` have no ``user``; they are shared by all
    admin and staff accounts.
    """

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="notifications",
        null=True,
        blank=True,
    )
    audience = models.CharField(max_length=10, choices=Audience.choices, default=Audience.USER)
    type = models.CharField(
        max_length=20, choices=NotificationType.choices, default=NotificationType.SYSTEM
    )
    title = models.CharField(max_length=150)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True, default="")
    is_read = models.BooleanField(default=False)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notifications_user_read_idx"),
            models.Index(fields=["audience"], name="notifications_audience_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type}: {self.title}"
