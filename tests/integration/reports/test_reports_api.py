from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

REPORTS_URL = "/api/reports"


def _money(value):
    return Decimal(str(value))


@pytest.fixture()
def sales(place_order, customer):
    """Two live orders of 115.00 each and one cancelled order."""
    kept = [place_order(), place_order()]
    cancelled = place_order()
    Order.objects.filter(id=cancelled.id).update(status=OrderStatus.CANCELLED)
    return kept


class TestSales:
    def test_totals_skip_cancelled_orders(self, staff_client, sales):
        response = staff_client.get(f"{REPORTS_URL}/sales")

        assert response.status_code == 200
        data = response.data
        assert data["period"] == "month"
        assert data["total_orders"] == 2
        assert _money(data["total_sales"]) == Decimal("230.00")
        assert _money(data["average_order_value"]) == Decimal("115.00")
        assert _money(data["total_vat"]) == Decimal("10.00")
        assert _money(data["total_delivery_fees"]) == Decimal("20.00")
        assert _money(data["net_revenue"]) == Decimal("200.00")
        assert _money(data["cost_of_goods"]) == Decimal("120.00")
        assert _money(data["gross_profit"]) == Decimal("80.00")
        assert _money(data["gross_profit_margin"]) == Decimal("40.00")

    def test_empty_period(self, staff_client):
        response = staff_client.get(f"{REPORTS_URL}/sales", {"period": "today"})

        assert response.status_code == 200
        assert response.data["total_orders"] == 0
        assert _money(response.data["average_order_value"]) == Decimal("0")
        assert _money(response.data["gross_profit_margin"]) == Decimal("0")

    def test_half_open_range_rejected(self, staff_client):
        response = staff_client.get(f"{REPORTS_URL}/sales", {"start_date": "2030-01-01"})

        assert response.status_code == 400

    def test_by_category(self, staff_client, sales):
        response = staff_client.get(f"{REPORTS_URL}/sales-by-category")

        assert response.status_code == 200
        assert len(response.data) == 1
        row = response.data[0]
        assert row["category"] == "Beef"
        assert _money(row["total_sales"]) == Decimal("200.00")
        assert _money(row["total_quantity"]) == Decimal("4")
        assert _money(row["percentage"]) == Decimal("100.00")

    def test_by_product(self, staff_client, sales, product):
        response = staff_client.get(f"{REPORTS_URL}/sales-by-product", {"limit": 5})

        assert response.status_code == 200
        assert [row["product_id"] for row in response.data] == [str(product.id)]
        row = response.data[0]
        assert row["product_name"] == "Ribeye Steak"
        assert _money(row["average_price"]) == Decimal("50.00")

    def test_by_product_limit_bounds(self, staff_client):
        response = staff_client.get(f"{REPORTS_URL}/sales-by-product", {"limit": 0})

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "limit"

    def test_timeseries_by_day(self, staff_client, sales):
        response = staff_client.get(f"{REPORTS_URL}/sales-timeseries", {"group_by": "day"})

        assert response.status_code == 200
        assert response.data == [
            {
                "date": timezone.localdate().isoformat(),
                "sales": Decimal("230.00"),
                "orders": 2,
                "customers": 1,
            }
        ]

    def test_timeseries_unknown_grouping(self, staff_client):
        response = staff_client.get(f"{REPORTS_URL}/sales-timeseries", {"group_by": "hour"})

        assert response.status_code == 400


class TestCustomers:
    def test_top_customers_and_emirates(self, staff_client, sales, customer, other_customer):
        response = staff_client.get(f"{REPORTS_URL}/customers")

        assert response.status_code == 200
        top = response.data["top_customers"]
        assert [row["user_id"] for row in top] == [str(customer.id)]
        assert top[0]["name"] == "Ahmed"
        assert top[0]["total_orders"] == 2
        assert _money(top[0]["total_spent"]) == Decimal("230.00")
        assert response.data["active_customers"] == 1
        assert response.data["returning_customers"] == 1
        assert response.data["customers_by_emirate"] == [
            {"emirate": "Dubai", "count": 2, "percentage": Decimal("100.00")}
        ]


class TestInventory:
    def test_stock_position(self, staff_client, sales, product, second_product):
        response = staff_client.get(f"{REPORTS_URL}/inventory")

        assert response.status_code == 200
        data = response.data
        assert data["total_products"] == 2
        assert _money(data["total_stock_value"]) == Decimal("3000.00")
        assert [row["product_id"] for row in data["top_selling_products"]] == [str(product.id)]
        slow = [row["product_id"] for row in data["slow_moving_products"]]
        assert slow == [str(second_product.id)]
        assert data["slow_moving_products"][0]["days_since_last_sale"] is None

    def test_low_stock_items(self, staff_client, second_product):
        second_product.stock.quantity = Decimal("3")
        second_product.stock.save()

        response = staff_client.get(f"{REPORTS_URL}/inventory")

        low = response.data["low_stock_items"]
        assert [row["product_id"] for row in low] == [str(second_product.id)]
        assert _money(low[0]["suggested_reorder_quantity"]) == Decimal("20")


class TestOrders:
    def test_breakdowns(self, staff_client, sales):
        response = staff_client.get(f"{REPORTS_URL}/orders")

        assert response.status_code == 200
        data = response.data
        assert data["total_orders"] == 3
        assert data["status_breakdown"]["pending"] == 2
        assert data["status_breakdown"]["cancelled"] == 1
        assert data["status_breakdown"]["delivered"] == 0
        assert data["payment_breakdown"]["cod"] == 3
        assert _money(data["cancellation_rate"]) == Decimal("33.33")
        assert data["delivery_performance"]["total_delivered"] == 0


def test_reports_are_staff_only(customer_client):
    assert customer_client.get(f"{REPORTS_URL}/sales").status_code == 403
    assert customer_client.get(f"{REPORTS_URL}/inventory").status_code == 403
