"""Integration tests for the response envelope and standardized errors."""

import pytest

pytestmark = pytest.mark.integration


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get("/api/orders")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert isinstance(body["errors"], list)
        assert body["errors"][0]["code"] == "not_authenticated"

    def test_validation_error_names_the_field(self, customer_client):
        response = customer_client.post("/api/addresses", {"full_name": "Ahmed"}, format="json")

        assert response.status_code == 400
        attrs = {error["attr"] for error in response.data["errors"]}
        assert {"mobile", "emirate", "area"} <= attrs

    def test_domain_error_has_code(self, customer_client):
        response = customer_client.get("/api/orders/number/ORD-00000000-000000")

        assert response.status_code == 404
        assert response.data["errors"] == [
            {"code": "not_found", "detail": "Order not found.", "attr": None}
        ]

    def test_forbidden_for_wrong_role(self, customer_client):
        response = customer_client.get("/api/users")
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_success_is_wrapped_in_envelope(self, api_client):
        response = api_client.get("/api/settings")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["vat_rate"] == response.data["vat_rate"]
