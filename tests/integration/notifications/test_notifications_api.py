import pytest

from modules.notifications.models import Notification
from modules.notifications.repositories.django_repository import NotificationDjangoRepository
from modules.notifications.services import NotificationService

pytestmark = pytest.mark.integration

URL = "/api/notifications"


@pytest.fixture()
def service():
    return NotificationService(NotificationDjangoRepository())


class TestInbox:
    def test_lists_own_notifications_with_unread_count(
        self, customer_client, customer, other_customer, service
    ):
        service.notify_user(customer, "Order placed", "Your order was received.", type="order")
        service.notify_user(other_customer, "Not yours", "Hidden")

        response = customer_client.get(URL)

        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["unread_count"] == 1
        assert response.data["results"][0]["title"] == "Order placed"
        assert response.data["results"][0]["type"] == "order"

    def test_staff_also_sees_back_office_broadcasts(self, staff_client, customer_client, service):
        service.notify_admins("New order", "Order ORD-1 placed.")

        assert staff_client.get(URL).data["count"] == 1
        assert customer_client.get(URL).data["count"] == 0

    def test_unread_filter(self, customer_client, customer, service):
        read = service.notify_user(customer, "Old", "Seen")
        service.mark_read(customer, str(read.id))
        service.notify_user(customer, "New", "Unseen")

        response = customer_client.get(URL, {"unread": "true"})

        assert [n["title"] for n in response.data["results"]] == ["New"]

    def test_mark_one_read(self, customer_client, customer, service):
        notification = service.notify_user(customer, "Hello", "World")

        response = customer_client.patch(f"{URL}/{notification.id}/read", format="json")

        assert response.status_code == 200
        assert response.data["is_read"] is True

    def test_cannot_touch_someone_elses_notification(
        self, other_client, customer, service
    ):
        notification = service.notify_user(customer, "Hello", "World")

        response = other_client.patch(f"{URL}/{notification.id}/read", format="json")

        assert response.status_code == 404

    def test_mark_all_read(self, customer_client, customer, service):
        service.notify_user(customer, "One", "1")
        service.notify_user(customer, "Two", "2")

        response = customer_client.patch(f"{URL}/read-all", format="json")

        assert response.data == {"updated": 2}
        assert customer_client.get(URL).data["unread_count"] == 0

    def test_delete_one(self, customer_client, customer, service):
        notification = service.notify_user(customer, "Hello", "World")

        response = customer_client.delete(f"{URL}/{notification.id}")

        assert response.status_code == 204
        assert not Notification.objects.filter(id=notification.id).exists()

    def test_clear_keeps_broadcasts(self, staff_client, staff, service):
        service.notify_user(staff, "Mine", "Personal")
        service.notify_admins("Shared", "Broadcast")

        response = staff_client.delete(URL)

        assert response.data == {"deleted": 1}
        assert Notification.objects.filter(audience="admin").count() == 1


class TestSend:
    def test_staff_sends_to_customer(self, staff_client, customer):
        response = staff_client.post(
            URL,
            {
                "user_id": str(customer.id),
                "title": "Eid offer",
                "message": "15% off lamb this week",
                "type": "promo",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["type"] == "promo"
        assert Notification.objects.filter(user=customer, title="Eid offer").exists()

    def test_unknown_recipient(self, staff_client):
        response = staff_client.post(
            URL,
            {
                "user_id": "0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11",
                "title": "Hi",
                "message": "Hi",
            },
            format="json",
        )

        assert response.status_code == 404

    def test_customer_cannot_send(self, customer_client, other_customer):
        response = customer_client.post(
            URL,
            {"user_id": str(other_customer.id), "title": "Hi", "message": "Hi"},
            format="json",
        )

        assert response.status_code == 403
