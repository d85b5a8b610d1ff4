"""Integration tests for registration, login and bearer sessions."""

import pytest
from rest_framework.test import APIClient

from modules.accounts.models import Session, User

pytestmark = pytest.mark.integration

PASSWORD = "Butcher@123"

REGISTER_PAYLOAD = {
    "username": "Mariam_K",
    "email": "Mariam@Example.ae",
    "password": "Secure#Pass1",
    "first_name": "Mariam",
    "family_name": "Khalid",
    "mobile": "+971 55 987 6543",
    "emirate": "Sharjah",
}


def _login(client, username, password=PASSWORD, path="/api/users/login"):
    return client.post(path, {"username": username, "password": password}, format="json")


class TestRegister:
    def test_register_creates_customer(self, api_client):
        response = api_client.post("/api/users/register", REGISTER_PAYLOAD, format="json")

        assert response.status_code == 201
        assert response.data["username"] == "mariam_k"
        assert response.data["email"] == "mariam@example.ae"
        assert response.data["mobile"] == "+971559876543"
        assert response.data["role"] == "customer"
        assert "password" not in response.data

    def test_register_ignores_requested_role(self, api_client):
        payload = {**REGISTER_PAYLOAD, "role": "admin"}
        response = api_client.post("/api/users/register", payload, format="json")

        assert response.status_code == 201
        assert User.objects.get(username="mariam_k").role == "customer"

    def test_duplicate_username_or_email(self, api_client, customer):
        payload = {**REGISTER_PAYLOAD, "email": customer.email}
        response = api_client.post("/api/users/register", payload, format="json")

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "user_exists"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("password", "weakpass"),
            ("mobile", "0501234567"),
            ("email", "not-an-email"),
            ("username", "ab"),
        ],
    )
    def test_invalid_fields(self, api_client, field, value):
        response = api_client.post(
            "/api/users/register", {**REGISTER_PAYLOAD, field: value}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == field


class TestLogin:
    def test_login_returns_bearer_token(self, api_client, customer):
        response = _login(api_client, "ahmed")

        assert response.status_code == 200
        assert response.data["token_type"] == "Bearer"
        assert response.data["user"]["id"] == str(customer.id)
        assert Session.objects.filter(user=customer).count() == 1

        customer.refresh_from_db()
        assert customer.last_login_at is not None

    def test_login_by_email(self, api_client, customer):
        assert _login(api_client, "AHMED@example.ae").status_code == 200

    def test_token_authenticates_requests(self, api_client, customer):
        token = _login(api_client, "ahmed").data["token"]

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = client.get("/api/users/me")

        assert response.status_code == 200
        assert response.data["username"] == "ahmed"

    def test_only_token_digest_is_stored(self, api_client, customer):
        token = _login(api_client, "ahmed").data["token"]
        assert Session.objects.get(user=customer).token_hash == Session.hash_token(token)

    def test_wrong_password(self, api_client, customer):
        response = _login(api_client, "ahmed", password="Wrong@pass1")

        assert response.status_code == 401
        assert response.data["detail"] == "Invalid credentials."

    def test_inactive_account(self, api_client, customer):
        customer.is_active = False
        customer.save()

        response = _login(api_client, "ahmed")
        assert response.status_code == 401
        assert response.data["detail"] == "Account is deactivated. Please contact support."

    def test_invalid_token_is_rejected(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")

        response = client.get("/api/users/me")
        assert response.status_code == 401


class TestAdminLogin:
    def test_staff_can_use_admin_login(self, api_client, staff):
        response = _login(api_client, "sara", path="/api/users/admin-login")
        assert response.status_code == 200
        assert response.data["user"]["role"] == "staff"

    def test_driver_can_use_admin_login(self, api_client, driver):
        assert _login(api_client, "rashid", path="/api/users/admin-login").status_code == 200

    def test_customer_is_rejected(self, api_client, customer):
        response = _login(api_client, "ahmed", path="/api/users/admin-login")

        assert response.status_code == 401
        assert response.data["detail"] == "This login is for staff accounts only."


class TestLogoutAndPassword:
    def test_logout_deletes_session(self, api_client, customer):
        token = _login(api_client, "ahmed").data["token"]
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = client.post("/api/users/logout")

        assert response.status_code == 200
        assert response.data == {"message": "Logged out."}
        assert not Session.objects.filter(user=customer).exists()
        assert client.get("/api/users/me").status_code == 401

    def test_change_password_revokes_other_sessions(self, api_client, customer):
        first = _login(api_client, "ahmed").data["token"]
        second = _login(api_client, "ahmed").data["token"]
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {first}")

        response = client.post(
            "/api/users/change-password",
            {"current_password": PASSWORD, "new_password": "Fresh#Pass2"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data == {"message": "Password changed."}
        remaining = Session.objects.filter(user=customer)
        assert [s.token_hash for s in remaining] == [Session.hash_token(first)]
        assert Session.hash_token(second) not in [s.token_hash for s in remaining]
        assert _login(api_client, "ahmed", password="Fresh#Pass2").status_code == 200

    def test_change_password_wrong_current(self, customer_client):
        response = customer_client.post(
            "/api/users/change-password",
            {"current_password": "Nope@1234", "new_password": "Fresh#Pass2"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "incorrect_password"
