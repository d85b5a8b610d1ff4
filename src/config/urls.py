from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from django.urls import include, path

API_MODULES = [
    "modules.accounts.urls",
    "modules.catalog.urls",
    "modules.promotions.urls",
    "modules.orders.urls",
    "modules.delivery.urls",
    "modules.payments.urls",
    "modules.wallet.urls",
    "modules.loyalty.urls",
    "modules.chat.urls",
    "modules.notifications.urls",
    "modules.suppliers.urls",
    "modules.finance.urls",
    "modules.reports.urls",
]

urlpatterns = [
    path("", include("modules.core.urls")),
    # OpenAPI schema & docs (public)
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    # Domain modules
    *[path("api/", include(module)) for module in API_MODULES],
]
