from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.notifications.views import NotificationViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("notifications", NotificationViewSet, basename="notification")

clear_all = NotificationViewSet.as_view({"get": "list", "post": "create", "delete": "clear"})

urlpatterns = [
    path("notifications", clear_all, name="notification-list"),
    *router.urls,
]
