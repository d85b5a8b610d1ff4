from decimal import Decimal

import pytest

from modules.catalog.models import Stock
from modules.finance.models import FinanceAccount, FinanceTransaction
from modules.orders.models import Order
from modules.payments.models import Payment

pytestmark = pytest.mark.integration

PROCESS_URL = "/api/payments/process"
GOOD_CARD = {"number": "4242 4242 4242 4242", "expiry": "12/30", "cvv": "123"}
DECLINED_CARD = {"number": "4000000000000002", "expiry": "12/30", "cvv": "123"}


def _pay(client, order, method="card", card=GOOD_CARD, **extra):
    payload = {"order_id": str(order.id), "method": method, **extra}
    if card is not None and method == "card":
        payload["card"] = card
    return client.post(PROCESS_URL, payload, format="json")


@pytest.fixture()
def card_account():
    return FinanceAccount.objects.create(name="Card Settlements", type="card_payments")


@pytest.fixture()
def paid_payment(customer_client, order, card_account):
    response = _pay(customer_client, order)
    assert response.status_code == 201
    return Payment.objects.get(id=response.data["payment"]["id"])


class TestProcess:
    def test_card_payment_is_captured(self, customer_client, order, card_account):
        response = _pay(customer_client, order)

        assert response.status_code == 201
        assert response.data["message"] == "Payment successful"
        payment = response.data["payment"]
        assert payment["status"] == "captured"
        assert payment["amount"] == "115.00"
        assert payment["card_brand"] == "Visa"
        assert payment["card_last4"] == "4242"
        assert payment["gateway_transaction_id"].startswith("txn_")

        order.refresh_from_db()
        assert order.payment_status == "captured"
        card_account.refresh_from_db()
        assert card_account.balance == Decimal("115.00")
        assert FinanceTransaction.objects.filter(type="sale", account=card_account).count() == 1

    def test_cash_on_delivery_stays_pending(self, customer_client, order):
        response = _pay(customer_client, order, method="cod")

        assert response.status_code == 201
        assert response.data["message"] == "Order confirmed. Pay on delivery."
        assert response.data["payment"]["status"] == "pending"
        assert FinanceTransaction.objects.count() == 0

    def test_declined_card_marks_order_failed(self, customer_client, order):
        response = _pay(customer_client, order, card=DECLINED_CARD)

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "payment_declined"
        assert response.data["detail"] == "Payment declined. Please try another card."
        order.refresh_from_db()
        assert order.payment_status == "failed"
        assert not Payment.objects.filter(order=order).exists()

    def test_expired_card(self, customer_client, order):
        response = _pay(
            customer_client, order, card={**GOOD_CARD, "expiry": "01/20"}
        )

        assert response.status_code == 400
        assert response.data["detail"] == "Card has expired or expiry is invalid"

    def test_retry_after_decline_succeeds(self, customer_client, order):
        _pay(customer_client, order, card=DECLINED_CARD)

        response = _pay(customer_client, order)

        assert response.status_code == 201
        order.refresh_from_db()
        assert order.payment_status == "captured"

    def test_second_payment_rejected(self, customer_client, order, paid_payment):
        response = _pay(customer_client, order)

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "payment_already_captured"

    def test_cancelled_order_cannot_be_paid(self, customer_client, order):
        customer_client.post(f"/api/orders/{order.id}/cancel", format="json")

        response = _pay(customer_client, order)

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_payment_state"

    def test_card_details_required(self, customer_client, order):
        response = _pay(customer_client, order, card=None)

        assert response.status_code == 400
        assert (
            response.data["errors"][0]["detail"]
            == "Card details are required for card payments."
        )

    def test_other_customer_cannot_pay(self, other_client, order):
        response = _pay(other_client, order)

        assert response.status_code == 403

    def test_unknown_order(self, customer_client):
        response = customer_client.post(
            PROCESS_URL,
            {"order_id": "0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11", "method": "cod"},
            format="json",
        )

        assert response.status_code == 404


class TestCapture:
    def test_staff_captures_cash_payment(self, customer_client, staff_client, order):
        created = _pay(customer_client, order, method="cod")
        payment_id = created.data["payment"]["id"]

        response = staff_client.post(f"/api/payments/{payment_id}/capture", format="json")

        assert response.status_code == 200
        assert response.data["message"] == "Payment captured successfully"
        assert response.data["payment"]["status"] == "captured"
        assert response.data["payment"]["captured_at"] is not None
        order.refresh_from_db()
        assert order.payment_status == "captured"

    def test_captured_payment_cannot_be_captured_again(self, staff_client, paid_payment):
        response = staff_client.post(f"/api/payments/{paid_payment.id}/capture", format="json")

        assert response.status_code == 400
        assert response.data["detail"] == "Cannot capture payment with status: captured"

    def test_customer_cannot_capture(self, customer_client, paid_payment):
        response = customer_client.post(
            f"/api/payments/{paid_payment.id}/capture", format="json"
        )

        assert response.status_code == 403


class TestRefund:
    def test_partial_refund(self, staff_client, paid_payment, order, card_account):
        response = staff_client.post(
            f"/api/payments/{paid_payment.id}/refund",
            {"amount": "50.00", "reason": "Short weight"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["message"] == "Refund of AED 50.00 processed successfully"
        payment = response.data["payment"]
        assert payment["status"] == "partially_refunded"
        assert payment["refunded_amount"] == "50.00"
        assert payment["refundable_amount"] == "65.00"
        [refund] = payment["refunds"]
        assert refund["id"].startswith("ref_")
        assert refund["reason"] == "Short weight"

        order.refresh_from_db()
        assert order.payment_status == "partially_refunded"
        assert order.status == "pending"
        card_account.refresh_from_db()
        assert card_account.balance == Decimal("65.00")

    def test_refund_over_balance_rejected(self, staff_client, paid_payment):
        staff_client.post(
            f"/api/payments/{paid_payment.id}/refund",
            {"amount": "50.00", "reason": "Short weight"},
            format="json",
        )

        response = staff_client.post(
            f"/api/payments/{paid_payment.id}/refund",
            {"amount": "100.00", "reason": "Again"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "refund_exceeds_balance"
        assert response.data["detail"] == "Maximum refundable amount is AED 65.00"

    def test_full_refund_refunds_order(self, staff_client, paid_payment, order, product):
        response = staff_client.post(
            f"/api/payments/{paid_payment.id}/refund",
            {"amount": "115.00", "reason": "Customer unavailable"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["payment"]["status"] == "refunded"
        order = Order.objects.get(id=order.id)
        assert order.status == "refunded"
        assert order.payment_status == "refunded"
        assert Stock.objects.get(product=product).reserved_quantity == Decimal("0")

    def test_pending_payment_cannot_be_refunded(self, customer_client, staff_client, order):
        created = _pay(customer_client, order, method="cod")

        response = staff_client.post(
            f"/api/payments/{created.data['payment']['id']}/refund",
            {"amount": "10.00", "reason": "Test"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_payment_state"

    def test_reason_required(self, staff_client, paid_payment):
        response = staff_client.post(
            f"/api/payments/{paid_payment.id}/refund", {"amount": "10.00"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "reason"


class TestPaymentQueries:
    def test_customer_reads_payment_for_order(self, customer_client, order, paid_payment):
        response = customer_client.get(f"/api/payments/order/{order.id}")

        assert response.status_code == 200
        assert response.data["id"] == str(paid_payment.id)

    def test_no_payment_for_order(self, customer_client, order):
        response = customer_client.get(f"/api/payments/order/{order.id}")

        assert response.status_code == 404
        assert response.data["detail"] == "Payment not found for this order"

    def test_other_customer_cannot_read_payment(self, other_client, order, paid_payment):
        response = other_client.get(f"/api/payments/order/{order.id}")

        assert response.status_code == 403

    def test_staff_lists_and_filters(self, staff_client, paid_payment):
        everything = staff_client.get("/api/payments")
        refunded = staff_client.get("/api/payments", {"status": "refunded"})

        assert everything.data["count"] == 1
        assert refunded.data["count"] == 0

    def test_customer_cannot_list(self, customer_client):
        response = customer_client.get("/api/payments")

        assert response.status_code == 403

    def test_stats(self, staff_client, paid_payment):
        response = staff_client.get("/api/payments/stats")

        assert response.status_code == 200
        assert response.data["total_payments"] == 1
        assert Decimal(str(response.data["total_amount"])) == Decimal("115.00")
        assert response.data["by_method"]["card"]["count"] == 1
