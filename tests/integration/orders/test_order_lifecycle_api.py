import re
from decimal import Decimal

import pytest

from modules.catalog.models import Stock
from modules.core.models import OutboxEvent
from modules.loyalty.models import LoyaltyAccount
from modules.notifications.models import Notification
from modules.orders.models import Order
from modules.payments.models import Payment
from modules.wallet.models import Wallet

pytestmark = pytest.mark.integration


def _order_url(order, suffix=""):
    return f"/api/orders/{order.id}{suffix}"


def _advance_to(client, order, steps):
    response = None
    for _ in range(steps):
        response = client.post(_order_url(order, "/advance"), format="json")
        assert response.status_code == 200
    return response


class TestAdvance:
    def test_confirm_assigns_invoice_number(self, staff_client, order):
        response = staff_client.post(_order_url(order, "/advance"), format="json")

        assert response.status_code == 200
        assert response.data["status"] == "confirmed"
        assert re.fullmatch(r"INV-\d{6}-\d{5}", response.data["invoice_number"])
        assert response.data["status_history"][-1]["old_status"] == "pending"
        assert response.data["status_history"][-1]["new_status"] == "confirmed"

    def test_full_lifecycle_settles_order(self, staff_client, order, product, customer):
        response = _advance_to(staff_client, order, 5)

        data = response.data
        assert data["status"] == "delivered"
        assert data["payment_status"] == "captured"
        assert data["actual_delivery_at"] is not None
        assert [h["new_status"] for h in data["status_history"]] == [
            "pending",
            "confirmed",
            "processing",
            "ready_for_pickup",
            "out_for_delivery",
            "delivered",
        ]

        stock = Stock.objects.get(product=product)
        assert stock.quantity == Decimal("98")
        assert stock.reserved_quantity == Decimal("0")

    def test_delivery_records_payment_cashback_and_points(
        self, staff_client, order, customer
    ):
        _advance_to(staff_client, order, 5)

        payment = Payment.objects.get(order_id=order.id)
        assert payment.status == "captured"
        assert payment.amount == Decimal("115.00")

        # 50.00 welcome bonus plus 2% cashback on 115.00
        assert Wallet.objects.get(user=customer).balance == Decimal("52.30")
        assert LoyaltyAccount.objects.get(user=customer).points == 115
        assert Notification.objects.filter(
            user=customer, message__contains="has been delivered"
        ).exists()

    def test_delivered_order_cannot_advance(self, staff_client, order):
        _advance_to(staff_client, order, 5)

        response = staff_client.post(_order_url(order, "/advance"), format="json")

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_order_status"

    def test_stale_expected_status_conflicts(self, staff_client, order):
        response = staff_client.post(
            _order_url(order, "/advance"), {"expected_status": "processing"}, format="json"
        )

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "stale_order_status"
        order.refresh_from_db()
        assert order.status == "pending"

    def test_customer_cannot_advance(self, customer_client, order):
        response = customer_client.post(_order_url(order, "/advance"), format="json")

        assert response.status_code == 403

    def test_unknown_order(self, staff_client):
        response = staff_client.post(
            "/api/orders/0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11/advance", format="json"
        )

        assert response.status_code == 404
        assert response.data["detail"] == "Order not found."


class TestUpdateStatus:
    def test_staff_sets_valid_status(self, staff_client, order):
        response = staff_client.patch(
            _order_url(order, "/status"),
            {"status": "confirmed", "notes": "Called the customer"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["status"] == "confirmed"
        assert response.data["status_history"][-1]["notes"] == "Called the customer"

    def test_skipping_steps_is_rejected(self, staff_client, order):
        response = staff_client.patch(
            _order_url(order, "/status"), {"status": "delivered"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_order_status"

    def test_unknown_status_value(self, staff_client, order):
        response = staff_client.patch(
            _order_url(order, "/status"), {"status": "lost"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "status"

    def test_refund_after_delivery_keeps_stock(self, staff_client, order, product):
        _advance_to(staff_client, order, 5)

        response = staff_client.patch(
            _order_url(order, "/status"), {"status": "refunded"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "refunded"
        assert Stock.objects.get(product=product).quantity == Decimal("98")

    def test_refund_before_delivery_releases_stock(self, staff_client, order, product):
        response = staff_client.patch(
            _order_url(order, "/status"), {"status": "refunded"}, format="json"
        )

        assert response.status_code == 200
        stock = Stock.objects.get(product=product)
        assert stock.quantity == Decimal("100")
        assert stock.reserved_quantity == Decimal("0")

    def test_terminal_order_cannot_move(self, staff_client, order):
        staff_client.post(_order_url(order, "/cancel"), format="json")

        response = staff_client.patch(
            _order_url(order, "/status"), {"status": "confirmed"}, format="json"
        )

        assert response.status_code == 400


class TestCancel:
    def test_customer_cancels_pending_order(self, customer_client, order, product, customer):
        response = customer_client.post(
            _order_url(order, "/cancel"), {"reason": "Changed my mind"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "cancelled"
        assert response.data["status_history"][-1]["notes"] == "Cancelled: Changed my mind"
        assert Stock.objects.get(product=product).reserved_quantity == Decimal("0")
        assert OutboxEvent.objects.filter(event_type="OrderCancelled").count() == 1
        assert Notification.objects.filter(user=customer, title="Order cancelled").exists()

    def test_customer_cannot_cancel_confirmed_order(self, customer_client, staff_client, order):
        staff_client.post(_order_url(order, "/advance"), format="json")

        response = customer_client.post(_order_url(order, "/cancel"), format="json")

        assert response.status_code == 400
        assert response.data["detail"] == "Orders can only be cancelled while pending."

    def test_staff_cancels_processing_order(self, staff_client, order, product):
        _advance_to(staff_client, order, 2)

        response = staff_client.post(_order_url(order, "/cancel"), format="json")

        assert response.status_code == 200
        assert response.data["status_history"][-1]["notes"] == "Order cancelled"
        assert Stock.objects.get(product=product).reserved_quantity == Decimal("0")

    def test_delivered_order_cannot_be_cancelled(self, staff_client, order):
        _advance_to(staff_client, order, 5)

        response = staff_client.post(_order_url(order, "/cancel"), format="json")

        assert response.status_code == 400

    def test_other_customer_cannot_cancel(self, other_client, order):
        response = other_client.post(_order_url(order, "/cancel"), format="json")

        assert response.status_code == 403
        order.refresh_from_db()
        assert order.status == "pending"


class TestPaymentStatus:
    def test_staff_marks_order_paid(self, staff_client, order):
        response = staff_client.patch(
            _order_url(order, "/payment-status"), {"payment_status": "captured"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["payment_status"] == "captured"
        assert (
            response.data["status_history"][-1]["notes"]
            == "Payment status changed from pending to captured"
        )
        assert Payment.objects.get(order_id=order.id).status == "captured"

    def test_cancelled_order_cannot_be_marked_paid(self, staff_client, order):
        staff_client.post(_order_url(order, "/cancel"), format="json")

        response = staff_client.patch(
            _order_url(order, "/payment-status"), {"payment_status": "captured"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_payment_status"

    def test_customer_cannot_change_payment_status(self, customer_client, order):
        response = customer_client.patch(
            _order_url(order, "/payment-status"), {"payment_status": "captured"}, format="json"
        )

        assert response.status_code == 403


class TestDelete:
    def test_admin_soft_deletes_order(self, admin_client, order):
        response = admin_client.delete(_order_url(order))

        assert response.status_code == 204
        assert not Order.objects.alive().filter(id=order.id).exists()
        assert Order.objects.dead().filter(id=order.id).exists()
        assert admin_client.get(_order_url(order)).status_code == 404

    def test_staff_cannot_delete(self, staff_client, order):
        response = staff_client.delete(_order_url(order))

        assert response.status_code == 403

    def test_deleting_open_order_releases_reservation(self, admin_client, order, product):
        stock = Stock.objects.get(product=product)
        assert stock.reserved_quantity == Decimal("2")

        response = admin_client.delete(_order_url(order))

        assert response.status_code == 204
        stock.refresh_from_db()
        assert stock.reserved_quantity == Decimal("0")
        assert stock.available_quantity == Decimal("100")
        deleted = Order.objects.dead().get(id=order.id)
        assert deleted.status == "cancelled"
        assert deleted.status_history.last().notes == "Order deleted"

    def test_deleting_delivered_order_keeps_stock(self, admin_client, staff_client, order, product):
        _advance_to(staff_client, order, 5)

        response = admin_client.delete(_order_url(order))

        assert response.status_code == 204
        stock = Stock.objects.get(product=product)
        assert stock.quantity == Decimal("98")
        assert stock.reserved_quantity == Decimal("0")
        assert Order.objects.dead().get(id=order.id).status == "delivered"
