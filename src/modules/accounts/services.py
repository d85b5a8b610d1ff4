"""Account use cases: registration, bearer sessions, profiles and addresses."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from modules.accounts.constants import BACK_OFFICE_ROLES, SESSION_TOKEN_BYTES, UserRole
from modules.accounts.exceptions import (
    AddressNotFound,
    IncorrectPassword,
    InvalidCredentials,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.models import Address, Session, User

if TYPE_CHECKING:
    from modules.accounts.dtos import (
        AddressDTO,
        AdminResetPasswordDTO,
        ChangePasswordDTO,
        LoginDTO,
        RegisterUserDTO,
        UpdateUserDTO,
    )
    from modules.accounts.repositories.interfaces import (
        IAddressRepository,
        ISessionRepository,
        IUserRepository,
    )

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str
    expires_at: datetime


class AuthService:
    """Registration, login/logout and password changes."""

    def __init__(
        self,
        user_repository: IUserRepository,
        session_repository: ISessionRepository,
    ) -> None:
        self._users = user_repository
        self._sessions = session_repository

    @transaction.atomic
    def register(self, dto: RegisterUserDTO) -> User:
        """Create an account.

        Self-registration always yields a customer; back-office roles are
        granted by admins through ``create_user``.
        """
        return self.create_user(dto, role=UserRole.CUSTOMER)

    @transaction.atomic
    def create_user(self, dto: RegisterUserDTO, role: str | None = None) -> User:
        log = logger.bind(username=dto.username)
        if self._users.username_or_email_taken(dto.username, dto.email):
            log.warning("user.duplicate")
            raise UserAlreadyExists()

        user = User(
            username=dto.username,
            email=dto.email,
            first_name=dto.first_name,
            family_name=dto.family_name,
            mobile=dto.mobile,
            emirate=dto.emirate or "",
            role=role or dto.role,
        )
        user.set_password(dto.password)
        user = self._users.save(user)
        log.info("user.registered", user_id=str(user.id), role=user.role)
        return user

    @transaction.atomic
    def login(
        self, dto: LoginDTO, back_office: bool = False, **meta: Any
    ) -> LoginResult:
        """Check credentials and open a session.

        ``back_office`` restricts the login to admin, staff and delivery
        accounts.  The same ``InvalidCredentials`` is raised for every
        failure so the response does not reveal which part was wrong.
        """
        user = self._users.get_by_login(dto.username)
        if user is None or not user.check_password(dto.password):
            logger.warning("auth.login_failed", reason="bad_credentials")
            raise InvalidCredentials()
        if not user.is_active:
            logger.warning("auth.login_failed", reason="inactive", user_id=str(user.id))
            raise InvalidCredentials("Account is deactivated. Please contact support.")
        if back_office and user.role not in BACK_OFFICE_ROLES:
            logger.warning("auth.login_failed", reason="not_staff", user_id=str(user.id))
            raise InvalidCredentials("This login is for staff accounts only.")

        token = secrets.token_hex(SESSION_TOKEN_BYTES)
        expires_at = timezone.now() + timedelta(hours=settings.SESSION_TOKEN_TTL_HOURS)
        self._sessions.create(user, token, expires_at, **meta)

        user.last_login_at = timezone.now()
        user.save(update_fields=["last_login_at"])

        logger.info("auth.login", user_id=str(user.id), role=user.role)
        return LoginResult(user=user, token=token, expires_at=expires_at)

    def authenticate_token(self, token: str) -> Session | None:
        """Return the live session for ``token`` or ``None``."""
        session = self._sessions.get_by_token(token)
        if session is None or session.is_expired or not session.user.is_active:
            return None
        return session

    def logout(self, session: Session) -> None:
        self._sessions.delete(session)
        logger.info("auth.logout", user_id=str(session.user_id))

    @transaction.atomic
    def change_password(
        self, user: User, dto: ChangePasswordDTO, current_session: Session | None = None
    ) -> None:
        """Replace the password and sign out every other session."""
        if not user.check_password(dto.current_password):
            raise IncorrectPassword()
        user.set_password(dto.new_password)
        self._users.save(user)
        revoked = self._sessions.delete_for_user(str(user.id), keep=current_session)
        logger.info("auth.password_changed", user_id=str(user.id), revoked_sessions=revoked)

    def admin_reset_password(self, user_id: str, dto: AdminResetPasswordDTO) -> User:
        """Set a password without the current one; the user is signed out everywhere."""
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        user.set_password(dto.new_password)
        self._users.save(user)
        revoked = self._sessions.delete_for_user(str(user.id))
        logger.info("auth.password_reset_by_admin", user_id=str(user.id), revoked_sessions=revoked)
        return user

    def purge_expired_sessions(self) -> int:
        return self._sessions.purge_expired()


class UserService:
    """Profile reads/updates and the admin user directory."""

    def __init__(self, user_repository: IUserRepository) -> None:
        self._users = user_repository

    def get_user(self, id: str) -> User:
        user = self._users.get_by_id(id)
        if not user:
            raise UserNotFound()
        return user

    def list_users(self, filters: Dict[str, Any] | None = None):
        return self._users.list(filters)

    @transaction.atomic
    def update_user(self, id: str, dto: UpdateUserDTO, allow_admin_fields: bool = False) -> User:
        """Apply the non-null fields of ``dto``.

        ``role``, ``is_active`` and ``is_verified`` are only honoured for
        admin callers.
        """
        user = self.get_user(id)
        if dto.email is not None and self._users.email_taken(dto.email, exclude_id=id):
            raise UserAlreadyExists("Email already registered.")

        fields = ["first_name", "family_name", "email", "mobile", "emirate", "preferred_language"]
        if allow_admin_fields:
            fields += ["role", "is_active", "is_verified"]
        for field in fields:
            value = getattr(dto, field)
            if value is not None:
                setattr(user, field, value)
        user = self._users.save(user)
        logger.info("user.updated", user_id=str(user.id))
        return user

    @transaction.atomic
    def deactivate_user(self, id: str) -> User:
        user = self.get_user(id)
        user.is_active = False
        self._users.save(user)
        Session.objects.filter(user=user).delete()
        logger.info("user.deactivated", user_id=str(user.id))
        return user

    def list_drivers(self):
        return self._users.list({"role": UserRole.DELIVERY, "is_active": True})

    def stats(self) -> dict:
        queryset = self._users.list()
        month_start = timezone.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        by_role = {role: 0 for role in UserRole.values}
        for row in queryset.values("role").annotate(count=Count("id")):
            by_role[row["role"]] = row["count"]
        return {
            "total": queryset.count(),
            "active": queryset.filter(is_active=True).count(),
            "verified": queryset.filter(is_verified=True).count(),
            "by_role": by_role,
            "new_this_month": queryset.filter(created_at__gte=month_start).count(),
        }


class AddressService:
    def __init__(self, address_repository: IAddressRepository) -> None:
        self._addresses = address_repository

    def list_addresses(self, user: User):
        return self._addresses.for_user(str(user.id))

    def get_address(self, user: User, id: str) -> Address:
        address = self._addresses.get_by_id(id)
        if address is None or address.user_id != user.id:
            raise AddressNotFound()
        return address

    @transaction.atomic
    def add_address(self, user: User, dto: AddressDTO) -> Address:
        """Save a new address; the first one becomes the default."""
        make_default = dto.is_default or not self._addresses.for_user(str(user.id)).exists()
        address = Address(user=user, **dto.model_dump(exclude={"is_default"}))
        address.is_default = make_default
        address = self._addresses.save(address)
        if make_default:
            self._addresses.clear_default(str(user.id), exclude_id=str(address.id))
        logger.info("address.created", user_id=str(user.id), address_id=str(address.id))
        return address

    @transaction.atomic
    def update_address(self, user: User, id: str, data: Dict[str, Any]) -> Address:
        address = self.get_address(user, id)
        for field, value in data.items():
            setattr(address, field, value)
        address = self._addresses.save(address)
        if address.is_default:
            self._addresses.clear_default(str(user.id), exclude_id=str(address.id))
        return address

    @transaction.atomic
    def set_default(self, user: User, id: str) -> Address:
        return self.update_address(user, id, {"is_default": True})

    @transaction.atomic
    def delete_address(self, user: User, id: str) -> None:
        address = self.get_address(user, id)
        address.delete()
        if address.is_default:
            successor = self._addresses.for_user(str(user.id)).first()
            if successor:
                successor.is_default = True
                self._addresses.save(successor)
        logger.info("address.deleted", user_id=str(user.id), address_id=str(id))
