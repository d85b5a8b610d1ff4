"""Integration tests for stock levels and movements."""

from decimal import Decimal

import pytest

from modules.catalog.models import Stock, StockMovement

pytestmark = pytest.mark.integration

URL = "/api/stock"


def _stock(product):
    return Stock.objects.get(product=product)


class TestStockMovements:
    def test_stock_in(self, staff_client, product, staff):
        response = staff_client.post(
            f"{URL}/update",
            {"product_id": str(product.id), "type": "in", "quantity": "20", "reason": "Delivery"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["movement"]["previous_quantity"] == "100.000"
        assert response.data["movement"]["new_quantity"] == "120.000"
        assert response.data["movement"]["performed_by_id"] == str(staff.id)
        assert response.data["stock"]["quantity"] == "120.000"

    def test_stock_out_beyond_available(self, staff_client, product, order):
        # 2 kg are reserved by the order
        response = staff_client.post(
            f"{URL}/update",
            {"product_id": str(product.id), "type": "out", "quantity": "99"},
            format="json",
        )

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "insufficient_stock"
        assert _stock(product).quantity == Decimal("100")

    def test_adjustment_cannot_drop_below_reserved(self, staff_client, product, order):
        response = staff_client.post(
            f"{URL}/update",
            {"product_id": str(product.id), "type": "adjustment", "quantity": "1"},
            format="json",
        )
        assert response.status_code == 400

    def test_adjustment_sets_absolute_quantity(self, staff_client, product):
        response = staff_client.post(
            f"{URL}/update",
            {"product_id": str(product.id), "type": "adjustment", "quantity": "42.5"},
            format="json",
        )

        assert response.status_code == 200
        assert _stock(product).quantity == Decimal("42.5")

    def test_zero_quantity_rejected_for_in(self, staff_client, product):
        response = staff_client.post(
            f"{URL}/update",
            {"product_id": str(product.id), "type": "in", "quantity": "0"},
            format="json",
        )
        assert response.status_code == 400

    def test_bulk_update_is_all_or_nothing(self, staff_client, product, second_product):
        response = staff_client.post(
            f"{URL}/bulk-update",
            {
                "movements": [
                    {"product_id": str(product.id), "type": "out", "quantity": "5"},
                    {"product_id": str(second_product.id), "type": "out", "quantity": "50"},
                ]
            },
            format="json",
        )

        assert response.status_code == 409
        assert _stock(product).quantity == Decimal("100")

    def test_bulk_update(self, staff_client, product, second_product):
        response = staff_client.post(
            f"{URL}/bulk-update",
            {
                "movements": [
                    {"product_id": str(product.id), "type": "out", "quantity": "5"},
                    {"product_id": str(second_product.id), "type": "in", "quantity": "5"},
                ]
            },
            format="json",
        )

        assert response.status_code == 200
        assert response.data["updated"] == 2
        assert _stock(second_product).quantity == Decimal("15")

    def test_customer_forbidden(self, customer_client, product):
        assert customer_client.get(URL).status_code == 403


class TestRestockAndAlerts:
    def test_restock_records_batch(self, staff_client, product):
        response = staff_client.post(
            f"{URL}/restock/{product.id}",
            {"quantity": "30", "batch_number": "B-2026-07"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["quantity"] == "130.000"
        assert response.data["batch_number"] == "B-2026-07"
        assert response.data["last_restocked_at"] is not None

    def test_alerts_list_low_stock(self, staff_client, product, second_product):
        staff_client.patch(
            f"{URL}/{second_product.id}/thresholds", {"low_stock_threshold": "12"}, format="json"
        )

        response = staff_client.get(f"{URL}/alerts")

        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["results"][0]["sku"] == "CHK-WHL-001"
        assert response.data["results"][0]["is_low"] is True

    def test_movements_filtered_by_product(self, staff_client, product, second_product, order):
        response = staff_client.get(f"{URL}/movements", {"product": str(product.id)})

        assert response.status_code == 200
        types = [row["type"] for row in response.data["results"]]
        assert types == ["reserved"]
        assert StockMovement.objects.filter(product=second_product).count() == 0

    def test_retrieve_by_product_id(self, staff_client, product):
        response = staff_client.get(f"{URL}/{product.id}")

        assert response.status_code == 200
        assert response.data["product_id"] == str(product.id)
        assert response.data["available_quantity"] == "100.000"
