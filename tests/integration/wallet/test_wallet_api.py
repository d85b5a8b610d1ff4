from decimal import Decimal

import pytest

from modules.core.models import ShopSettings
from modules.wallet.models import Wallet, WalletTransaction

pytestmark = pytest.mark.integration


class TestWallet:
    def test_first_read_opens_wallet_with_welcome_bonus(self, customer_client, customer):
        response = customer_client.get("/api/wallet")

        assert response.status_code == 200
        assert response.data["balance"] == "50.00"
        assert response.data["currency"] == "AED"
        assert response.data["user_id"] == str(customer.id)
        [bonus] = response.data["transactions"]
        assert bonus["type"] == "credit"
        assert bonus["description"] == "Welcome bonus! Start shopping with us"
        assert bonus["balance_after"] == "50.00"

    def test_wallet_opened_once(self, customer_client, customer):
        customer_client.get("/api/wallet")
        customer_client.get("/api/wallet")

        assert Wallet.objects.filter(user=customer).count() == 1
        assert WalletTransaction.objects.filter(wallet__user=customer).count() == 1

    def test_no_bonus_when_disabled(self, customer_client):
        shop = ShopSettings.load()
        shop.welcome_bonus = Decimal("0")
        shop.save()

        response = customer_client.get("/api/wallet")

        assert response.data["balance"] == "0.00"
        assert response.data["transactions"] == []

    def test_requires_authentication(self, api_client):
        assert api_client.get("/api/wallet").status_code == 401


class TestTopUpAndDeduct:
    def test_top_up(self, customer_client):
        response = customer_client.post(
            "/api/wallet/topup", {"amount": "100.00"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["message"] == "Wallet topped up successfully"
        assert Decimal(str(response.data["balance"])) == Decimal("150.00")
        latest = customer_client.get("/api/wallet").data["transactions"][0]
        assert latest["type"] == "topup"
        assert latest["description"] == "Top up via card"

    def test_top_up_must_be_positive(self, customer_client):
        response = customer_client.post("/api/wallet/topup", {"amount": "0"}, format="json")

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "amount"

    def test_deduct(self, customer_client):
        response = customer_client.post(
            "/api/wallet/deduct",
            {"amount": "20.00", "description": "Order ORD-20260315-ABC123"},
            format="json",
        )

        assert response.status_code == 200
        assert Decimal(str(response.data["balance"])) == Decimal("30.00")

    def test_deduct_more_than_balance(self, customer_client, customer):
        customer_client.get("/api/wallet")

        response = customer_client.post(
            "/api/wallet/deduct", {"amount": "75.00", "description": "Too much"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "insufficient_balance"
        assert Wallet.objects.get(user=customer).balance == Decimal("50.00")

    def test_failed_deduct_does_not_open_wallet(self, customer_client, customer):
        response = customer_client.post(
            "/api/wallet/deduct", {"amount": "75.00", "description": "Too much"}, format="json"
        )

        assert response.status_code == 400
        assert not Wallet.objects.filter(user=customer).exists()


class TestStaffCredit:
    def test_staff_credits_customer(self, staff_client, customer):
        response = staff_client.post(
            "/api/wallet/credit",
            {
                "user_id": str(customer.id),
                "amount": "25.00",
                "type": "refund",
                "description": "Goodwill refund",
            },
            format="json",
        )

        assert response.status_code == 200
        assert response.data["user_id"] == str(customer.id)
        assert Decimal(str(response.data["balance"])) == Decimal("75.00")
        assert WalletTransaction.objects.filter(
            wallet__user=customer, type="refund", description="Goodwill refund"
        ).exists()

    def test_debit_type_not_allowed(self, staff_client, customer):
        response = staff_client.post(
            "/api/wallet/credit",
            {
                "user_id": str(customer.id),
                "amount": "25.00",
                "type": "debit",
                "description": "Sneaky",
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "type"

    def test_unknown_user(self, staff_client):
        response = staff_client.post(
            "/api/wallet/credit",
            {
                "user_id": "0190a6c2-7b6e-7cc2-9a4e-0b8b5f0e0d11",
                "amount": "25.00",
                "description": "Nobody",
            },
            format="json",
        )

        assert response.status_code == 404

    def test_customer_cannot_credit(self, customer_client, customer):
        response = customer_client.post(
            "/api/wallet/credit",
            {"user_id": str(customer.id), "amount": "25.00", "description": "Self"},
            format="json",
        )

        assert response.status_code == 403
