"""Integration tests for discount codes."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.promotions.models import DiscountCode

pytestmark = pytest.mark.integration

URL = "/api/promotions"


def make_code(code="WELCOME10", type="percentage", value="10", **extra):
    now = timezone.now()
    values = {
        "valid_from": now - timedelta(days=1),
        "valid_to": now + timedelta(days=30),
    }
    values.update(extra)
    return DiscountCode.objects.create(code=code, type=type, value=Decimal(value), **values)


def _validate(client, code, total):
    return client.post(f"{URL}/validate", {"code": code, "order_total": total}, format="json")


class TestValidate:
    def test_valid_percentage_code_is_case_insensitive(self, api_client):
        make_code()

        response = _validate(api_client, "welcome10", "250")

        assert response.status_code == 200
        assert response.data["valid"] is True
        assert response.data["code"] == "WELCOME10"
        assert Decimal(str(response.data["discount"])) == Decimal("25.00")

    def test_fixed_code_capped_at_total(self, api_client):
        make_code(code="BBQ25", type="fixed", value="25")
        response = _validate(api_client, "BBQ25", "20")
        assert Decimal(str(response.data["discount"])) == Decimal("20.00")

    def test_unknown_code(self, api_client):
        response = _validate(api_client, "NOPE", "100")

        assert response.status_code == 400
        assert response.data["detail"] == "Invalid promo code"

    def test_expired_code(self, api_client):
        now = timezone.now()
        make_code(valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1))

        response = _validate(api_client, "WELCOME10", "100")
        assert response.data["detail"] == "This promo code has expired"

    def test_below_minimum(self, api_client):
        make_code(minimum_order=Decimal("200"))

        response = _validate(api_client, "WELCOME10", "150")
        assert response.data["detail"] == "Minimum order of 200 AED required"

    def test_usage_limit_reached(self, api_client):
        make_code(usage_limit=5, usage_count=5)
        response = _validate(api_client, "WELCOME10", "100")
        assert response.data["detail"] == "This promo code has reached its usage limit"

    def test_inactive_code(self, api_client):
        make_code(is_active=False)
        response = _validate(api_client, "WELCOME10", "100")
        assert response.data["detail"] == "This promo code is no longer active"

    def test_already_used_by_customer(self, customer_client, place_order):
        make_code()
        place_order(discount_code="WELCOME10")

        response = _validate(customer_client, "WELCOME10", "100")

        assert response.status_code == 400
        assert response.data["detail"] == "You have already used this promo code"


class TestDiscountCodeAdmin:
    def _payload(self, **overrides):
        now = timezone.now()
        payload = {
            "code": "eid15",
            "type": "percentage",
            "value": "15",
            "maximum_discount": "50",
            "valid_from": now.isoformat(),
            "valid_to": (now + timedelta(days=7)).isoformat(),
        }
        payload.update(overrides)
        return payload

    def test_staff_creates_code(self, staff_client):
        response = staff_client.post(URL, self._payload(), format="json")

        assert response.status_code == 201
        assert response.data["code"] == "EID15"
        assert response.data["usage_count"] == 0

    def test_duplicate_code(self, staff_client):
        make_code(code="EID15")
        response = staff_client.post(URL, self._payload(), format="json")
        assert response.status_code == 409

    def test_percentage_over_100(self, staff_client):
        response = staff_client.post(URL, self._payload(value="150"), format="json")
        assert response.status_code == 400

    def test_window_must_be_ordered(self, staff_client):
        now = timezone.now()
        payload = self._payload(valid_to=(now - timedelta(days=1)).isoformat())
        assert staff_client.post(URL, payload, format="json").status_code == 400

    def test_customer_cannot_list(self, customer_client):
        assert customer_client.get(URL).status_code == 403

    def test_update_and_delete(self, staff_client):
        code = make_code()

        updated = staff_client.patch(f"{URL}/{code.id}", {"is_active": False}, format="json")
        deleted = staff_client.delete(f"{URL}/{code.id}")

        assert updated.status_code == 200
        assert updated.data["is_active"] is False
        assert deleted.status_code == 204
        assert not DiscountCode.objects.filter(pk=code.pk).exists()
