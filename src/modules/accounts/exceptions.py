"""Account domain exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError, NotFoundError


class UserAlreadyExists(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "An account with this username or email already exists."
    code = "user_exists"


class InvalidCredentials(DomainError):
    """Unknown login, wrong password or deactivated account."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials."
    code = "invalid_credentials"


class WeakPassword(DomainError):
    default_detail = "Password does not meet the strength requirements."
    code = "weak_password"


class UserNotFound(NotFoundError):
    default_detail = "User not found."


class AddressNotFound(NotFoundError):
    default_detail = "Address not found."


class IncorrectPassword(DomainError):
    default_detail = "Current password is incorrect."
    code = "incorrect_password"
