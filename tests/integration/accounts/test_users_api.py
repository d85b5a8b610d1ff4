"""Integration tests for profiles and the admin user directory."""

import pytest

from modules.accounts.models import Session

pytestmark = pytest.mark.integration


class TestMe:
    def test_get_profile(self, customer_client, customer):
        response = customer_client.get("/api/users/me")

        assert response.status_code == 200
        assert response.data["id"] == str(customer.id)
        assert response.data["full_name"] == "Ahmed"

    def test_update_profile(self, customer_client):
        response = customer_client.patch(
            "/api/users/me",
            {"family_name": "Al Mansoori", "preferred_language": "ar"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["full_name"] == "Ahmed Al Mansoori"
        assert response.data["preferred_language"] == "ar"

    def test_customer_cannot_promote_themselves(self, customer_client, customer):
        customer_client.patch("/api/users/me", {"role": "admin"}, format="json")
        customer.refresh_from_db()
        assert customer.role == "customer"

    def test_email_taken_by_someone_else(self, customer_client, other_customer):
        response = customer_client.patch(
            "/api/users/me", {"email": other_customer.email}, format="json"
        )
        assert response.status_code == 409


class TestUserDirectory:
    def test_admin_lists_users(self, admin_client, customer, staff):
        response = admin_client.get("/api/users")

        assert response.status_code == 200
        assert response.data["count"] == 3
        assert {row["username"] for row in response.data["results"]} == {"boss", "ahmed", "sara"}

    def test_filter_by_role_and_search(self, admin_client, customer, other_customer, staff):
        response = admin_client.get("/api/users", {"role": "customer", "search": "fati"})

        assert [row["username"] for row in response.data["results"]] == ["fatima"]

    def test_staff_cannot_list_users(self, staff_client):
        assert staff_client.get("/api/users").status_code == 403

    def test_admin_creates_staff_account(self, admin_client):
        response = admin_client.post(
            "/api/users",
            {
                "username": "newstaff",
                "email": "newstaff@butcher.ae",
                "password": "Staff#Pass1",
                "first_name": "Noor",
                "mobile": "+971501112233",
                "role": "staff",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["role"] == "staff"

    def test_admin_updates_role(self, admin_client, customer):
        response = admin_client.patch(
            f"/api/users/{customer.id}", {"role": "delivery", "is_verified": True}, format="json"
        )

        assert response.status_code == 200
        assert response.data["role"] == "delivery"
        assert response.data["is_verified"] is True

    def test_deactivate_revokes_sessions(self, admin_client, customer, api_client):
        api_client.post(
            "/api/users/login", {"username": "ahmed", "password": "Butcher@123"}, format="json"
        )
        assert Session.objects.filter(user=customer).exists()

        response = admin_client.delete(f"/api/users/{customer.id}")

        assert response.status_code == 204
        customer.refresh_from_db()
        assert customer.is_active is False
        assert not Session.objects.filter(user=customer).exists()

    def test_admin_cannot_deactivate_self(self, admin_client, admin):
        response = admin_client.delete(f"/api/users/{admin.id}")

        assert response.status_code == 400
        assert response.data["detail"] == "You cannot deactivate your own account."

    def test_unknown_user(self, admin_client):
        response = admin_client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    def test_stats(self, admin_client, customer, driver):
        response = admin_client.get("/api/users/stats")

        assert response.status_code == 200
        assert response.data["total"] == 3
        assert response.data["by_role"]["customer"] == 1
        assert response.data["by_role"]["delivery"] == 1
        assert response.data["by_role"]["staff"] == 0


class TestAdminResetPassword:
    def _url(self, user):
        return f"/api/users/{user.id}/admin-reset-password"

    def test_admin_sets_new_password(self, admin_client, customer, api_client):
        api_client.post(
            "/api/users/login", {"username": "ahmed", "password": "Butcher@123"}, format="json"
        )

        response = admin_client.post(
            self._url(customer), {"new_password": "Lamb&Rice2026"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["message"] == "Password reset successfully"
        customer.refresh_from_db()
        assert customer.check_password("Lamb&Rice2026")
        assert not Session.objects.filter(user=customer).exists()

    def test_weak_password_rejected(self, admin_client, customer):
        response = admin_client.post(self._url(customer), {"new_password": "short"}, format="json")

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "new_password"

    def test_unknown_user(self, admin_client):
        response = admin_client.post(
            "/api/users/00000000-0000-0000-0000-000000000000/admin-reset-password",
            {"new_password": "Lamb&Rice2026"},
            format="json",
        )

        assert response.status_code == 404

    def test_staff_cannot_reset(self, staff_client, customer):
        response = staff_client.post(
            self._url(customer), {"new_password": "Lamb&Rice2026"}, format="json"
        )

        assert response.status_code == 403
