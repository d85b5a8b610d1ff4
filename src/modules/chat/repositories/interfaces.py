from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING

from django.db.models import QuerySet

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.chat.models import ChatMessage


class IChatRepository(IRepository["ChatMessage"]):
    @abstractmethod
    def thread(self, user_id: str) -> QuerySet:
        """One customer's messages, oldest first."""

    @abstractmethod
    def mark_read(self, user_id: str, sender: str, flag: str) -> int:
        """Set ``flag`` on the thread's messages sent by ``sender``."""
