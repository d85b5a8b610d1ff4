import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.models import ShopSettings
from modules.core.permissions import IsAdmin
from modules.core.serializers import ShopSettingsSerializer

logger = structlog.get_logger(__name__)

HEALTH_CACHE_KEY = "_health_check"


def _ping_database() -> None:
    connection = connections["default"]
    connection.ensure_connection()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache() -> None:
    cache.set(HEALTH_CACHE_KEY, "ok", 10)
    if cache.get(HEALTH_CACHE_KEY) != "ok":
        raise ConnectionError("cache read-back mismatch")


SERVICE_CHECKS: Dict[str, Callable[[], None]] = {
    "database": _ping_database,
    "cache": _ping_cache,
}


def _check_service(name: str, ping: Callable[[], None]) -> Dict[str, Any]:
    started = time.monotonic()
    try:
        ping()
    except Exception:
        logger.error("health_check.service_down", service=name, exc_info=True)
        return {"status": "down"}
    return {"status": "up", "response_time_ms": round((time.monotonic() - started) * 1000, 2)}


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness check; 503 when any backing service is down."""
    services = {name: _check_service(name, ping) for name, ping in SERVICE_CHECKS.items()}
    healthy = all(service["status"] == "up" for service in services.values())
    state = "healthy" if healthy else "unhealthy"
    logger.info("health_check.completed", status=state)
    return JsonResponse(
        {
            "success": healthy,
            "data": {
                "status": state,
                "timestamp": timezone.now().isoformat(),
                "services": services,
            },
        },
        status=200 if healthy else 503,
    )


class ShopSettingsView(APIView):
    """GET is public (checkout needs VAT and fees); PATCH is admin only."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAdmin()]

    def get(self, request: Request) -> Response:
        return Response(ShopSettingsSerializer(ShopSettings.load()).data)

    def patch(self, request: Request) -> Response:
        instance = ShopSettings.load()
        serializer = ShopSettingsSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("shop_settings.updated", fields=sorted(serializer.validated_data))
        return Response(serializer.data)
