from __future__ import annotations

from modules.orders.factories import build_order_service
from modules.payments.gateway import get_gateway
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.payments.services import PaymentService


def build_payment_service() -> PaymentService:
    return PaymentService(
        payment_repository=PaymentDjangoRepository(),
        order_service=build_order_service(),
        gateway=get_gateway(),
    )
