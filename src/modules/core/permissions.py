"""Role-based permission classes.

Roles live on ``accounts.User.role``: customer, admin, staff and delivery.
"""

from __future__ import annotations

from rest_framework.permissions import BasePermission

ADMIN = "admin"
STAFF = "staff"
DELIVERY = "delivery"
CUSTOMER = "customer"

STAFF_ROLES = frozenset({ADMIN, STAFF})


def user_role(user) -> str | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None)


def is_staff_user(user) -> bool:
    return user_role(user) in STAFF_ROLES


class HasRole(BasePermission):
    allowed_roles: frozenset[str] = frozenset()

    def has_permission(self, request, view) -> bool:
        return user_role(request.user) in self.allowed_roles


class IsAdmin(HasRole):
    allowed_roles = frozenset({ADMIN})


class IsStaff(HasRole):
    allowed_roles = STAFF_ROLES


class IsDriver(HasRole):
    allowed_roles = frozenset({DELIVERY})


class IsStaffOrDriver(HasRole):
    allowed_roles = STAFF_ROLES | {DELIVERY}
