"""Account repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Address, Session, User


class IUserRepository(IRepository["User"]):
    @abstractmethod
    def get_by_login(self, identifier: str) -> Optional[User]:
        """Find a user by username or email, case-insensitively."""

    @abstractmethod
    def username_or_email_taken(self, username: str, email: str) -> bool:
        """``True`` when either value already belongs to an account."""

    @abstractmethod
    def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """``True`` when another account uses ``email``."""


class ISessionRepository(IRepository["Session"]):
    @abstractmethod
    def get_by_token(self, token: str) -> Optional[Session]:
        """Resolve a raw bearer token (with its user) or ``None``."""

    @abstractmethod
    def create(self, user: User, token: str, expires_at: datetime, **meta) -> Session:
        """Store a new session for ``token``."""

    @abstractmethod
    def delete(self, session: Session) -> None:
        """Remove one session."""

    @abstractmethod
    def delete_for_user(self, user_id: str, keep: Session | None = None) -> int:
        """Remove the user's sessions except ``keep``."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Delete every expired session and return how many went."""


class IAddressRepository(IRepository["Address"]):
    @abstractmethod
    def for_user(self, user_id: str):
        """Live addresses of one user, default first."""

    @abstractmethod
    def clear_default(self, user_id: str, exclude_id: str | None = None) -> None:
        """Unset ``is_default`` on the user's other addresses."""
