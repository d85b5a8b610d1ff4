from decimal import Decimal

import pytest

from modules.catalog.models import Stock, StockMovement
from modules.finance.models import FinanceAccount, FinanceTransaction
from modules.suppliers.models import PurchaseOrder, Supplier

pytestmark = pytest.mark.integration

SUPPLIERS_URL = "/api/suppliers"
ORDERS_URL = "/api/purchase-orders"


def _supplier(client, **fields):
    payload = {
        "name": "Al Ain Farms",
        "email": "orders@alainfarms.ae",
        "phone": "+97137654321",
        "address": {"street": "Industrial Area 2", "city": "Al Ain", "emirate": "abu_dhabi"},
        "categories": ["beef", "lamb"],
        **fields,
    }
    return client.post(SUPPLIERS_URL, payload, format="json")


@pytest.fixture()
def supplier(staff_client):
    response = _supplier(staff_client)
    assert response.status_code == 201
    return response.data


@pytest.fixture()
def bank(staff_client):
    response = staff_client.post(
        "/api/finance/accounts",
        {"name": "Emirates NBD", "type": "bank", "balance": "1000.00"},
        format="json",
    )
    assert response.status_code == 201
    return response.data


@pytest.fixture()
def purchase_order(staff_client, supplier, product):
    response = staff_client.post(
        ORDERS_URL,
        {
            "supplier_id": supplier["id"],
            "items": [{"product_id": str(product.id), "quantity": "10"}],
            "expected_delivery_date": "2030-01-15",
            "delivery_address": "Main shop, Dubai Marina",
        },
        format="json",
    )
    assert response.status_code == 201
    return response.data


def _move(client, purchase_order, *statuses):
    for status in statuses:
        response = client.patch(
            f"{ORDERS_URL}/{purchase_order['id']}/status", {"status": status}, format="json"
        )
        assert response.status_code == 200, response.data
    return response.data


def _receive(client, purchase_order, quantity, **fields):
    item_id = purchase_order["items"][0]["id"]
    return client.post(
        f"{ORDERS_URL}/{purchase_order['id']}/receive",
        {"items": [{"item_id": item_id, "quantity": quantity}], **fields},
        format="json",
    )


class TestSuppliers:
    def test_create_assigns_code(self, staff_client):
        first = _supplier(staff_client).data
        second = _supplier(staff_client, name="Emirates Poultry").data

        assert first["code"] == "SUP-001"
        assert second["code"] == "SUP-002"
        assert first["status"] == "pending"
        assert first["payment_terms"] == "net_30"

    def test_single_primary_contact(self, staff_client):
        response = _supplier(
            staff_client,
            contacts=[
                {"name": "Omar", "is_primary": True},
                {"name": "Khalid", "is_primary": True},
            ],
        )

        assert response.status_code == 201
        flags = {c["name"]: c["is_primary"] for c in response.data["contacts"]}
        assert flags == {"Omar": False, "Khalid": True}

    def test_invalid_email(self, staff_client):
        response = _supplier(staff_client, email="not-an-email")

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "email"

    def test_list_filters_by_category(self, staff_client, supplier):
        _supplier(staff_client, name="Gulf Seafood", categories=["seafood"])

        response = staff_client.get(SUPPLIERS_URL, {"category": "seafood"})

        assert response.status_code == 200
        assert [s["name"] for s in response.data["results"]] == ["Gulf Seafood"]

    def test_partial_update(self, staff_client, supplier):
        response = staff_client.patch(
            f"{SUPPLIERS_URL}/{supplier['id']}",
            {"payment_terms": "net_15", "credit_limit": "5000.00"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["payment_terms"] == "net_15"
        assert response.data["credit_limit"] == "5000.00"
        assert response.data["name"] == "Al Ain Farms"

    def test_set_status(self, staff_client, supplier):
        response = staff_client.patch(
            f"{SUPPLIERS_URL}/{supplier['id']}/status", {"status": "active"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "active"

    def test_add_and_remove_contact(self, staff_client, supplier):
        added = staff_client.post(
            f"{SUPPLIERS_URL}/{supplier['id']}/contacts",
            {"name": "Omar", "phone": "+971501112233", "is_primary": True},
            format="json",
        )
        assert added.status_code == 201
        contact_id = added.data["contacts"][0]["id"]

        removed = staff_client.delete(f"{SUPPLIERS_URL}/{supplier['id']}/contacts/{contact_id}")

        assert removed.status_code == 200
        assert removed.data["contacts"] == []

    def test_remove_unknown_contact(self, staff_client, supplier):
        response = staff_client.delete(
            f"{SUPPLIERS_URL}/{supplier['id']}/contacts/0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11"
        )

        assert response.status_code == 404
        assert response.data["detail"] == "Contact not found."

    def test_unknown_supplier(self, staff_client):
        response = staff_client.get(f"{SUPPLIERS_URL}/0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11")

        assert response.status_code == 404
        assert response.data["detail"] == "Supplier not found."

    def test_delete_without_orders(self, staff_client, supplier):
        response = staff_client.delete(f"{SUPPLIERS_URL}/{supplier['id']}")

        assert response.status_code == 204
        assert staff_client.get(f"{SUPPLIERS_URL}/{supplier['id']}").status_code == 404

    def test_delete_blocked_by_open_order(self, staff_client, supplier, purchase_order):
        response = staff_client.delete(f"{SUPPLIERS_URL}/{supplier['id']}")

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "supplier_has_open_orders"

    def test_stats(self, staff_client, supplier, purchase_order):
        response = staff_client.get(f"{SUPPLIERS_URL}/stats")

        assert response.status_code == 200
        assert response.data["total_suppliers"] == 1
        assert response.data["by_status"]["pending"] == 1
        assert response.data["open_purchase_orders"] == 1
        assert Decimal(str(response.data["open_purchase_order_value"])) == Decimal("315.00")

    def test_customer_forbidden(self, customer_client):
        assert customer_client.get(SUPPLIERS_URL).status_code == 403


class TestSupplierProducts:
    def _offer(self, client, supplier, product, **fields):
        return client.post(
            f"{SUPPLIERS_URL}/{supplier['id']}/products",
            {"product_id": str(product.id), "unit_cost": "28.00", "supplier_sku": "AAF-RIB", **fields},
            format="json",
        )

    def test_add_and_list(self, staff_client, supplier, product):
        created = self._offer(staff_client, supplier, product)
        assert created.status_code == 201
        assert created.data["product_name"] == "Ribeye Steak"

        response = staff_client.get(f"{SUPPLIERS_URL}/{supplier['id']}/products")

        assert [o["supplier_sku"] for o in response.data] == ["AAF-RIB"]

    def test_duplicate_product(self, staff_client, supplier, product):
        self._offer(staff_client, supplier, product)

        response = self._offer(staff_client, supplier, product)

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "duplicate_supplier_product"

    def test_update_and_remove(self, staff_client, supplier, product):
        offer = self._offer(staff_client, supplier, product).data

        updated = staff_client.patch(
            f"{SUPPLIERS_URL}/products/{offer['id']}", {"unit_cost": "27.50"}, format="json"
        )
        assert updated.status_code == 200
        assert updated.data["unit_cost"] == "27.50"

        assert staff_client.delete(f"{SUPPLIERS_URL}/products/{offer['id']}").status_code == 204
        assert staff_client.get(f"{SUPPLIERS_URL}/{supplier['id']}/products").data == []

    def test_listed_cost_is_used_on_orders(self, staff_client, supplier, product):
        self._offer(staff_client, supplier, product)

        response = staff_client.post(
            ORDERS_URL,
            {
                "supplier_id": supplier["id"],
                "items": [{"product_id": str(product.id), "quantity": "2"}],
                "expected_delivery_date": "2030-01-15",
                "delivery_address": "Main shop",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["items"][0]["unit_cost"] == "28.00"
        assert response.data["items"][0]["supplier_sku"] == "AAF-RIB"


class TestPurchaseOrders:
    def test_create_computes_totals(self, purchase_order, supplier):
        assert purchase_order["order_number"].startswith("PO-")
        assert purchase_order["status"] == "draft"
        assert purchase_order["subtotal"] == "300.00"
        assert purchase_order["tax_amount"] == "15.00"
        assert purchase_order["total"] == "315.00"
        assert purchase_order["supplier_name"] == "Al Ain Farms"
        assert purchase_order["status_history"][0]["status"] == "draft"
        assert Supplier.objects.get(id=supplier["id"]).total_orders == 1

    def test_shipping_and_discount(self, staff_client, supplier, product):
        response = staff_client.post(
            ORDERS_URL,
            {
                "supplier_id": supplier["id"],
                "items": [{"product_id": str(product.id), "quantity": "1", "unit_cost": "100.00"}],
                "expected_delivery_date": "2030-01-15",
                "delivery_address": "Main shop",
                "shipping_cost": "20.00",
                "discount": "10.00",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["total"] == "115.00"

    def test_duplicate_products_rejected(self, staff_client, supplier, product):
        line = {"product_id": str(product.id), "quantity": "1"}
        response = staff_client.post(
            ORDERS_URL,
            {
                "supplier_id": supplier["id"],
                "items": [line, line],
                "expected_delivery_date": "2030-01-15",
                "delivery_address": "Main shop",
            },
            format="json",
        )

        assert response.status_code == 400

    def test_product_without_cost(self, staff_client, supplier, second_product):
        response = staff_client.post(
            ORDERS_URL,
            {
                "supplier_id": supplier["id"],
                "items": [{"product_id": str(second_product.id), "quantity": "5"}],
                "expected_delivery_date": "2030-01-15",
                "delivery_address": "Main shop",
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_purchase_order"

    def test_suspended_supplier_cannot_be_ordered_from(self, staff_client, supplier, product):
        Supplier.objects.filter(id=supplier["id"]).update(status="suspended")

        response = staff_client.post(
            ORDERS_URL,
            {
                "supplier_id": supplier["id"],
                "items": [{"product_id": str(product.id), "quantity": "1"}],
                "expected_delivery_date": "2030-01-15",
                "delivery_address": "Main shop",
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "supplier_unavailable"

    def test_approval_records_approver(self, staff_client, staff, purchase_order):
        data = _move(staff_client, purchase_order, "pending", "approved")

        assert data["status"] == "approved"
        assert data["approved_by_id"] == str(staff.id)
        assert [h["status"] for h in data["status_history"]] == ["draft", "pending", "approved"]

    def test_invalid_transition(self, staff_client, purchase_order):
        response = staff_client.patch(
            f"{ORDERS_URL}/{purchase_order['id']}/status", {"status": "ordered"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_purchase_order_status"

    def test_receiving_requires_approval(self, staff_client, purchase_order):
        response = _receive(staff_client, purchase_order, "1")

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_purchase_order_status"
        assert not FinanceTransaction.objects.filter(type="purchase").exists()

    def test_partial_then_full_receipt(self, staff_client, supplier, product, bank, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved", "ordered")

        partial = _receive(staff_client, purchase_order, "4")

        assert partial.status_code == 200
        assert partial.data["status"] == "partially_received"
        assert partial.data["received_amount"] == "126.00"
        assert partial.data["payment_status"] == "pending"
        assert Stock.objects.get(product=product).quantity == Decimal("104")
        movement = StockMovement.objects.get(product=product, reference_type="purchase")
        assert movement.type == "in"
        assert movement.reference_id == purchase_order["id"]
        on_credit = FinanceTransaction.objects.get(type="purchase")
        assert on_credit.amount == Decimal("-126.00")
        assert on_credit.account is None
        assert on_credit.reference_type == "purchase_order"

        full = _receive(staff_client, purchase_order, "6", account_id=bank["id"])

        assert full.status_code == 200
        assert full.data["status"] == "received"
        assert full.data["received_amount"] == "315.00"
        assert full.data["paid_amount"] == "189.00"
        assert full.data["payment_status"] == "partial"
        assert full.data["actual_delivery_date"] is not None
        assert Stock.objects.get(product=product).quantity == Decimal("110")
        paid = FinanceTransaction.objects.filter(type="purchase").exclude(account=None).get()
        assert paid.amount == Decimal("-189.00")
        assert FinanceAccount.objects.get(id=bank["id"]).balance == Decimal("811.00")

        refreshed = Supplier.objects.get(id=supplier["id"])
        assert refreshed.total_spent == Decimal("315.00")
        assert refreshed.current_balance == Decimal("126.00")

    def test_over_receipt_rejected(self, staff_client, product, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved")

        response = _receive(staff_client, purchase_order, "11")

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "over_receipt"
        assert Stock.objects.get(product=product).quantity == Decimal("100")

    def test_pay_outstanding_posts_payout(self, staff_client, supplier, bank, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved")
        _receive(staff_client, purchase_order, "10")

        response = staff_client.post(
            f"{ORDERS_URL}/{purchase_order['id']}/pay", {"account_id": bank["id"]}, format="json"
        )

        assert response.status_code == 200
        assert response.data["paid_amount"] == "315.00"
        assert response.data["outstanding"] == "0.00"
        assert response.data["payment_status"] == "paid"
        payout = FinanceTransaction.objects.get(type="payout")
        assert payout.amount == Decimal("-315.00")
        assert payout.reference_id == purchase_order["id"]
        assert FinanceAccount.objects.get(id=bank["id"]).balance == Decimal("685.00")
        assert Supplier.objects.get(id=supplier["id"]).current_balance == Decimal("0.00")

    def test_pay_more_than_owed(self, staff_client, bank, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved")
        _receive(staff_client, purchase_order, "2")

        response = staff_client.post(
            f"{ORDERS_URL}/{purchase_order['id']}/pay",
            {"account_id": bank["id"], "amount": "500.00"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_supplier_payment"
        assert not FinanceTransaction.objects.filter(type="payout").exists()

    def test_pay_from_unknown_account_rolls_back(self, staff_client, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved")
        _receive(staff_client, purchase_order, "10")

        response = staff_client.post(
            f"{ORDERS_URL}/{purchase_order['id']}/pay",
            {"account_id": "0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11"},
            format="json",
        )

        assert response.status_code == 404
        assert PurchaseOrder.objects.get(id=purchase_order["id"]).paid_amount == Decimal("0.00")

    def test_delete_draft(self, staff_client, purchase_order):
        response = staff_client.delete(f"{ORDERS_URL}/{purchase_order['id']}")

        assert response.status_code == 204
        assert not PurchaseOrder.objects.filter(id=purchase_order["id"]).exists()

    def test_delete_approved_rejected(self, staff_client, purchase_order):
        _move(staff_client, purchase_order, "pending", "approved")

        response = staff_client.delete(f"{ORDERS_URL}/{purchase_order['id']}")

        assert response.status_code == 400
        assert response.data["detail"] == "Only draft or cancelled purchase orders can be deleted."

    def test_list_filters_by_status(self, staff_client, purchase_order):
        response = staff_client.get(ORDERS_URL, {"status": "draft"})

        assert response.status_code == 200
        assert response.data["count"] == 1
        assert staff_client.get(ORDERS_URL, {"status": "received"}).data["count"] == 0

    def test_customer_forbidden(self, customer_client):
        assert customer_client.get(ORDERS_URL).status_code == 403
