"""Account URL configuration (mounted under ``/api/``)."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.accounts.views import (
    AddressViewSet,
    AdminLoginView,
    ChangePasswordView,
    LoginView,
    LogoutView,
    MeView,
    RegisterView,
    UserStatsView,
    UserViewSet,
)

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("users", UserViewSet, basename="user")
router.register("addresses", AddressViewSet, basename="address")

urlpatterns = [
    path("users/register", RegisterView.as_view(), name="user-register"),
    path("users/login", LoginView.as_view(), name="user-login"),
    path("users/admin-login", AdminLoginView.as_view(), name="user-admin-login"),
    path("users/logout", LogoutView.as_view(), name="user-logout"),
    path("users/me", MeView.as_view(), name="user-me"),
    path("users/change-password", ChangePasswordView.as_view(), name="user-change-password"),
    path("users/stats", UserStatsView.as_view(), name="user-stats"),
    *router.urls,
]
