import pytest

from modules.accounts.models import Address

pytestmark = pytest.mark.integration

URL = "/api/addresses"

PAYLOAD = {
    "label": "Work",
    "full_name": "Ahmed Ali",
    "mobile": "+971 50 123 4567",
    "emirate": "Dubai",
    "area": "Business Bay",
    "street": "Marasi Drive",
    "building": "Bay Square 5",
}


class TestAddresses:
    def test_first_address_becomes_default(self, customer_client):
        response = customer_client.post(URL, PAYLOAD, format="json")

        assert response.status_code == 201
        assert response.data["is_default"] is True
        assert response.data["mobile"] == "+971501234567"

    def test_new_default_clears_previous(self, customer_client, address):
        response = customer_client.post(URL, {**PAYLOAD, "is_default": True}, format="json")

        address.refresh_from_db()
        assert response.data["is_default"] is True
        assert address.is_default is False

    def test_list_is_unpaginated_and_scoped(self, customer_client, address, other_customer):
        Address.objects.create(
            user=other_customer, full_name="F", emirate="Dubai", area="JBR", street="s", building="b"
        )

        response = customer_client.get(URL)

        assert response.status_code == 200
        assert [row["id"] for row in response.data] == [str(address.id)]

    def test_other_users_address_is_not_found(self, other_client, address):
        assert other_client.get(f"{URL}/{address.id}").status_code == 404

    def test_partial_update(self, customer_client, address):
        response = customer_client.patch(f"{URL}/{address.id}", {"floor": "12"}, format="json")

        assert response.status_code == 200
        assert response.data["floor"] == "12"

    def test_set_default(self, customer_client, address):
        second = customer_client.post(URL, PAYLOAD, format="json").data

        response = customer_client.post(f"{URL}/{second['id']}/default")

        address.refresh_from_db()
        assert response.status_code == 200
        assert response.data["is_default"] is True
        assert address.is_default is False

    def test_deleting_default_promotes_another(self, customer_client, address):
        second = customer_client.post(URL, PAYLOAD, format="json").data

        response = customer_client.delete(f"{URL}/{address.id}")

        assert response.status_code == 204
        assert Address.objects.get(pk=second["id"]).is_default is True
        assert Address.objects.get(pk=address.id).is_deleted

    def test_invalid_coordinates(self, customer_client):
        response = customer_client.post(URL, {**PAYLOAD, "latitude": "95"}, format="json")
        assert response.status_code == 400
