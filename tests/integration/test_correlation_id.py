"""Integration tests for the X-Request-ID correlation middleware."""

import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationId:
    def test_incoming_request_id_is_echoed(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/health")
        assert response["X-Request-ID"] == cid

    def test_request_id_is_generated_when_missing(self, api_client):
        response = api_client.get("/health")
        generated = response["X-Request-ID"]
        assert uuid.UUID(generated).version == 4

    def test_api_errors_carry_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/orders")
        assert response.status_code == 401
        assert response["X-Request-ID"] == cid

    def test_malformed_request_id_is_replaced(self, api_client):
        response = api_client.get("/health", HTTP_X_REQUEST_ID="bad id\nforged=1")
        replaced = response["X-Request-ID"]
        assert replaced != "bad id\nforged=1"
        assert uuid.UUID(replaced).version == 4
