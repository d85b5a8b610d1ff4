from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/orders"


class TestListOrders:
    def test_customer_sees_only_own_orders(
        self, customer_client, other_customer, place_order, address, zone
    ):
        mine = place_order()

        response = customer_client.get(ORDERS_URL)

        assert response.status_code == 200
        assert response.data["count"] == 1
        row = response.data["results"][0]
        assert row["id"] == str(mine.id)
        assert row["total"] == "115.00"
        assert row["item_count"] == 1
        assert set(row) == {
            "id",
            "order_number",
            "customer_id",
            "status",
            "payment_status",
            "payment_method",
            "total",
            "is_express",
            "item_count",
            "created_at",
        }

    def test_other_customer_sees_nothing(self, other_client, order):
        response = other_client.get(ORDERS_URL)

        assert response.data["count"] == 0

    def test_staff_sees_all_and_filters_by_status(self, staff_client, place_order):
        first = place_order()
        place_order()
        staff_client.post(f"{ORDERS_URL}/{first.id}/advance", format="json")

        everything = staff_client.get(ORDERS_URL)
        confirmed = staff_client.get(ORDERS_URL, {"status": "confirmed"})

        assert everything.data["count"] == 2
        assert confirmed.data["count"] == 1
        assert confirmed.data["results"][0]["id"] == str(first.id)

    def test_filter_by_customer_and_total(self, staff_client, customer, place_order):
        place_order()

        by_customer = staff_client.get(ORDERS_URL, {"customer": str(customer.id)})
        too_expensive = staff_client.get(ORDERS_URL, {"min_total": "200"})

        assert by_customer.data["count"] == 1
        assert too_expensive.data["count"] == 0

    def test_search_by_order_number(self, staff_client, order):
        response = staff_client.get(ORDERS_URL, {"search": order.order_number[-6:]})

        assert response.data["count"] == 1

    def test_invalid_status_filter(self, staff_client, order):
        response = staff_client.get(ORDERS_URL, {"status": "lost"})

        assert response.status_code == 400


class TestRetrieveOrder:
    def test_owner_reads_order(self, customer_client, order):
        response = customer_client.get(f"{ORDERS_URL}/{order.id}")

        assert response.status_code == 200
        assert response.data["order_number"] == order.order_number
        assert response.data["vat_rate"] == "0.0500"

    def test_other_customer_is_denied(self, other_client, order):
        response = other_client.get(f"{ORDERS_URL}/{order.id}")

        assert response.status_code == 403

    def test_staff_reads_any_order(self, staff_client, order):
        response = staff_client.get(f"{ORDERS_URL}/{order.id}")

        assert response.status_code == 200

    def test_by_order_number(self, customer_client, order):
        response = customer_client.get(f"{ORDERS_URL}/number/{order.order_number}")

        assert response.status_code == 200
        assert response.data["id"] == str(order.id)

    def test_unknown_order_number(self, customer_client):
        response = customer_client.get(f"{ORDERS_URL}/number/ORD-20260101-FFFFFF")

        assert response.status_code == 404


class TestOrderStats:
    def test_counts_and_revenue(self, staff_client, place_order):
        kept = place_order()
        cancelled = place_order()
        staff_client.post(f"{ORDERS_URL}/{cancelled.id}/cancel", format="json")

        response = staff_client.get(f"{ORDERS_URL}/stats")

        assert response.status_code == 200
        data = response.data
        assert data["total_orders"] == 2
        assert data["by_status"]["pending"] == 1
        assert data["by_status"]["cancelled"] == 1
        assert data["by_status"]["delivered"] == 0
        assert Decimal(str(data["total_revenue"])) == kept.total
        assert Decimal(str(data["average_order_value"])) == Decimal("115.00")
        assert data["today"]["orders"] == 1
        assert data["pending_payments"] == 1

    def test_customer_cannot_read_stats(self, customer_client):
        response = customer_client.get(f"{ORDERS_URL}/stats")

        assert response.status_code == 403
