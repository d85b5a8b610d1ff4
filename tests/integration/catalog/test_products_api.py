"""Integration tests for the product catalog API."""

from decimal import Decimal

import pytest

from modules.catalog.models import Product, Stock

pytestmark = pytest.mark.integration

URL = "/api/products"


@pytest.fixture()
def hidden_product(category):
    product = Product.objects.create(
        sku="LAMB-OLD-001", name="Old Lamb", category=category, price=Decimal("40"), is_active=False
    )
    Stock.objects.create(product=product, quantity=Decimal("3"))
    return product


class TestPublicCatalog:
    def test_anonymous_list_hides_inactive_and_cost(self, api_client, product, hidden_product):
        response = api_client.get(URL)

        assert response.status_code == 200
        assert response.data["count"] == 1
        row = response.data["results"][0]
        assert row["sku"] == "BEEF-RIB-001"
        assert row["available_quantity"] == "100.000"
        assert row["in_stock"] is True
        assert "cost_price" not in row

    def test_staff_sees_inactive_and_cost(self, staff_client, product, hidden_product):
        response = staff_client.get(URL)

        assert response.data["count"] == 2
        assert "cost_price" in response.data["results"][0]

    def test_inactive_product_is_not_found_for_customers(self, api_client, hidden_product):
        assert api_client.get(f"{URL}/{hidden_product.id}").status_code == 404

    def test_effective_price_applies_discount(self, api_client, product):
        product.discount = Decimal("10")
        product.save()

        response = api_client.get(f"{URL}/{product.id}")

        assert response.data["price"] == "50.00"
        assert response.data["effective_price"] == "45.00"

    def test_filters(self, api_client, product, second_product):
        by_price = api_client.get(URL, {"max_price": "30"})
        by_search = api_client.get(URL, {"search": "ribeye"})
        by_category = api_client.get(URL, {"category": "beef"})

        assert [row["sku"] for row in by_price.data["results"]] == ["CHK-WHL-001"]
        assert [row["sku"] for row in by_search.data["results"]] == ["BEEF-RIB-001"]
        assert by_category.data["count"] == 2

    def test_ordering_by_price(self, api_client, product, second_product):
        response = api_client.get(URL, {"ordering": "-price"})
        assert [row["sku"] for row in response.data["results"]] == ["BEEF-RIB-001", "CHK-WHL-001"]


class TestProductAdmin:
    def test_create_with_initial_stock(self, admin_client, category):
        response = admin_client.post(
            URL,
            {
                "sku": "mar-kft-001",
                "name": "Kofta Mix",
                "category_id": str(category.id),
                "price": "55.00",
                "cost_price": "30.00",
                "initial_stock": "25",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["sku"] == "MAR-KFT-001"
        assert response.data["available_quantity"] == "25.000"
        assert response.data["category"]["slug"] == "beef"

    def test_duplicate_sku(self, admin_client, product):
        response = admin_client.post(
            URL, {"sku": "beef-rib-001", "name": "Copy", "price": "10"}, format="json"
        )

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "duplicate_sku"

    @pytest.mark.parametrize(
        "overrides",
        [{"price": "0"}, {"discount": "120"}, {"min_order_quantity": "5", "max_order_quantity": "1"}],
    )
    def test_invalid_product(self, admin_client, overrides):
        payload = {"sku": "X-1", "name": "X", "price": "10", **overrides}
        assert admin_client.post(URL, payload, format="json").status_code == 400

    def test_staff_cannot_create(self, staff_client):
        response = staff_client.post(URL, {"sku": "X-1", "name": "X", "price": "10"}, format="json")
        assert response.status_code == 403

    def test_update(self, admin_client, product):
        response = admin_client.patch(
            f"{URL}/{product.id}", {"price": "60.00", "is_featured": True}, format="json"
        )

        assert response.status_code == 200
        assert response.data["price"] == "60.00"
        assert response.data["is_featured"] is True

    def test_soft_delete(self, admin_client, api_client, product):
        response = admin_client.delete(f"{URL}/{product.id}")

        assert response.status_code == 204
        assert Product.objects.get(pk=product.pk).is_deleted
        assert api_client.get(URL).data["count"] == 0


class TestCategories:
    def test_public_list_is_unpaginated(self, api_client, category):
        response = api_client.get("/api/categories")

        assert response.status_code == 200
        assert [row["slug"] for row in response.data] == ["beef"]

    def test_staff_creates_with_unique_slug(self, staff_client, category):
        response = staff_client.post("/api/categories", {"name": "Beef"}, format="json")

        assert response.status_code == 201
        assert response.data["slug"] == "beef-2"

    def test_customer_cannot_create(self, customer_client):
        response = customer_client.post("/api/categories", {"name": "Goat"}, format="json")
        assert response.status_code == 403

    def test_update(self, staff_client, category):
        response = staff_client.patch(
            f"/api/categories/{category.id}", {"sort_order": 4}, format="json"
        )
        assert response.status_code == 200
        assert response.data["sort_order"] == 4
