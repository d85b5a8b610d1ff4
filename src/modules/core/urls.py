from django.urls import path

from modules.core.views import ShopSettingsView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/settings", ShopSettingsView.as_view(), name="shop_settings"),
]
