import pytest

pytestmark = pytest.mark.integration

URL = "/api/settings"


class TestShopSettingsAPI:
    def test_public_read(self, api_client):
        response = api_client.get(URL)

        assert response.status_code == 200
        assert response.data["vat_rate"] == "0.0500"
        assert response.data["minimum_order_amount"] == "50.00"

    def test_admin_can_update(self, admin_client):
        response = admin_client.patch(URL, {"delivery_fee": "12.50"}, format="json")

        assert response.status_code == 200
        assert response.data["delivery_fee"] == "12.50"
        assert admin_client.get(URL).data["delivery_fee"] == "12.50"

    def test_staff_cannot_update(self, staff_client):
        response = staff_client.patch(URL, {"delivery_fee": "1.00"}, format="json")
        assert response.status_code == 403

    def test_vat_rate_bounds(self, admin_client):
        response = admin_client.patch(URL, {"vat_rate": "1.5"}, format="json")

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "vat_rate"
