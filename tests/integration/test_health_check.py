import pytest

from modules.core.views import SERVICE_CHECKS

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_health_is_public_and_reports_services(self, api_client):
        response = api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"
        assert body["data"]["services"]["database"]["status"] == "up"
        assert body["data"]["services"]["cache"]["status"] == "up"
        assert "timestamp" in body["data"]

    def test_unhealthy_when_cache_is_down(self, api_client, monkeypatch):
        def broken():
            raise ConnectionError("redis unavailable")

        monkeypatch.setitem(SERVICE_CHECKS, "cache", broken)

        response = api_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["data"]["status"] == "unhealthy"
        assert body["data"]["services"]["cache"] == {"status": "down"}
        assert body["data"]["services"]["database"]["status"] == "up"
