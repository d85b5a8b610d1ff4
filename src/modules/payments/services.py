"""Payment use cases.

Every write locks the order before the payment row, the same order the
order workflow uses, and mirrors the payment status onto the order with
a history note.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import structlog
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone
from uuid6 import uuid7

from modules.core.money import ZERO, round2
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.payments.events import PaymentCaptured, PaymentRefunded
from modules.payments.exceptions import (
    InvalidPaymentState,
    PaymentAlreadyCaptured,
    PaymentNotFound,
    RefundExceedsBalance,
    RefundFailed,
)
from modules.payments.gateway import CardDetails
from modules.payments.models import Payment

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.orders.models import Order
    from modules.orders.services import OrderService
    from modules.payments.dtos import ProcessPaymentDTO, RefundDTO
    from modules.payments.gateway import PaymentGateway
    from modules.payments.repositories.interfaces import IPaymentRepository

logger = structlog.get_logger(__name__)

CAPTURABLE = (PaymentStatus.PENDING, PaymentStatus.AUTHORIZED)
REFUNDABLE = (PaymentStatus.CAPTURED, PaymentStatus.PARTIALLY_REFUNDED)


@dataclass(frozen=True)
class PaymentResult:
    payment: Optional[Payment]
    message: str = ""
    error: Optional[str] = None

    @property
    def declined(self) -> bool:
        return self.error is not None


class PaymentService:
    def __init__(
        self,
        payment_repository: IPaymentRepository,
        order_service: OrderService,
        gateway: PaymentGateway,
    ) -> None:
        self._payments = payment_repository
        self._orders = order_service
        self._gateway = gateway

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_payments(self):
        return self._payments.list()

    def get_payment(self, id: str) -> Payment:
        payment = self._payments.get_by_id(id)
        if payment is None:
            raise PaymentNotFound()
        return payment

    def get_for_order(self, user: User, order_id: str) -> Payment:
        order = self._orders.get_order(order_id)
        self._orders.check_access(user, order)
        payment = self._payments.latest_for_order(str(order.id))
        if payment is None:
            raise PaymentNotFound("Payment not found for this order")
        return payment

    def stats(self) -> dict:
        queryset = self._payments.list().order_by()
        totals = queryset.aggregate(
            count=Count("id"), amount=Sum("amount"), refunded=Sum("refunded_amount")
        )
        by_status = {
            row["status"]: {"count": row["count"], "amount": round2(row["amount"] or ZERO)}
            for row in queryset.values("status").annotate(count=Count("id"), amount=Sum("amount"))
        }
        by_method = {
            row["method"]: {"count": row["count"], "amount": round2(row["amount"] or ZERO)}
            for row in queryset.values("method").annotate(count=Count("id"), amount=Sum("amount"))
        }
        return {
            "total_payments": totals["count"],
            "total_amount": round2(totals["amount"] or ZERO),
            "total_refunded": round2(totals["refunded"] or ZERO),
            "by_status": by_status,
            "by_method": by_method,
        }

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------

    @transaction.atomic
    def process(self, user: User, dto: ProcessPaymentDTO) -> PaymentResult:
        """Pay for an order.

        A gateway decline is committed (the order is marked ``failed``)
        and reported through ``PaymentResult.error`` instead of raising.
        """
        order = self._orders.lock_order(dto.order_id)
        self._orders.check_access(user, order)
        log = logger.bind(order_id=str(order.id), method=dto.method)

        if self._payments.captured_for_order(str(order.id)) is not None:
            log.warning("payment.already_captured")
            raise PaymentAlreadyCaptured()
        if order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            raise InvalidPaymentState(f"Cannot pay for a {order.status} order.")

        amount = round2(dto.amount if dto.amount is not None else order.total)
        payment = self._payments.open_for_order(str(order.id)) or Payment(
            order=order, order_number=order.order_number, customer_id=order.customer_id
        )
        payment.amount = amount
        payment.method = dto.method

        if dto.method == PaymentMethod.CARD:
            card = dto.card
            result = self._gateway.charge(
                amount, CardDetails(card.number, card.expiry, card.cvv, card.holder_name)
            )
            if not result.success:
                self._orders.sync_payment_status(
                    order,
                    PaymentStatus.FAILED,
                    changed_by=user,
                    notes=f"Payment failed: {result.error or 'Decline'}",
                )
                log.info("payment.declined", reason=result.error)
                return PaymentResult(payment=None, error=result.error or "Payment failed")
            payment.gateway_transaction_id = result.transaction_id
            payment.card_brand = result.card_brand
            payment.card_last4 = result.card_last4

        if dto.method == PaymentMethod.COD:
            payment.status = PaymentStatus.PENDING
        else:
            payment.status = PaymentStatus.CAPTURED
            payment.captured_at = timezone.now()
            payment.add_domain_event(self._captured_event(payment, order))

        self._payments.save(payment)
        self._orders.sync_payment_status(
            order,
            payment.status,
            changed_by=user,
            notes=f"Payment status updated to {payment.status} via {dto.method}",
        )
        log.info("payment.processed", payment_id=str(payment.id), status=payment.status)
        message = (
            "Order confirmed. Pay on delivery."
            if dto.method == PaymentMethod.COD
            else "Payment successful"
        )
        return PaymentResult(payment=payment, message=message)

    # ------------------------------------------------------------------
    # Capture / refund
    # ------------------------------------------------------------------

    def _lock(self, id: str) -> tuple[Order, Payment]:
        payment = self.get_payment(id)
        order = self._orders.lock_order(str(payment.order_id))
        return order, self._payments.get_for_update(str(payment.id))

    @transaction.atomic
    def capture(self, id: str, user: User | None = None) -> Payment:
        order, payment = self._lock(id)
        if payment.status not in CAPTURABLE:
            raise InvalidPaymentState(f"Cannot capture payment with status: {payment.status}")
        payment.status = PaymentStatus.CAPTURED
        payment.captured_at = timezone.now()
        payment.add_domain_event(self._captured_event(payment, order))
        self._payments.save(payment)
        self._orders.sync_payment_status(
            order, PaymentStatus.CAPTURED, changed_by=user, notes="Payment captured"
        )
        logger.info("payment.captured", payment_id=str(payment.id), order_id=str(order.id))
        return payment

    @transaction.atomic
    def refund(self, id: str, dto: RefundDTO, user: User | None = None) -> Payment:
        order, payment = self._lock(id)
        log = logger.bind(payment_id=str(payment.id), order_id=str(order.id))
        if payment.status not in REFUNDABLE:
            raise InvalidPaymentState(f"Cannot refund payment with status: {payment.status}")
        amount = round2(dto.amount)
        if amount > payment.refundable_amount:
            raise RefundExceedsBalance(
                f"Maximum refundable amount is AED {payment.refundable_amount:.2f}"
            )

        refund_id = f"rf_{uuid7().hex[:12]}"
        if payment.method == PaymentMethod.CARD and payment.gateway_transaction_id:
            result = self._gateway.refund(payment.gateway_transaction_id, amount)
            if not result.success:
                log.warning("payment.refund_failed", reason=result.error)
                raise RefundFailed(result.error or RefundFailed.default_detail)
            refund_id = result.refund_id

        payment.refunds = [
            *payment.refunds,
            {
                "id": refund_id,
                "amount": str(amount),
                "reason": dto.reason,
                "status": "completed",
                "processed_by": str(user.id) if user else None,
                "created_at": timezone.now().isoformat(),
            },
        ]
        payment.refunded_amount = round2(payment.refunded_amount + amount)
        full = payment.refunded_amount >= payment.amount
        payment.status = PaymentStatus.REFUNDED if full else PaymentStatus.PARTIALLY_REFUNDED
        payment.add_domain_event(
            PaymentRefunded(
                aggregate_id=payment.id,
                order_id=str(order.id),
                order_number=order.order_number,
                amount=str(amount),
                reason=dto.reason,
                method=payment.method,
                full=full,
            )
        )
        self._payments.save(payment)

        self._orders.sync_payment_status(
            order,
            payment.status,
            changed_by=user,
            notes=f"Refund of AED {amount:.2f}: {dto.reason}",
        )
        if full and order.can_transition_to(OrderStatus.REFUNDED):
            self._orders.transition_locked(
                order, OrderStatus.REFUNDED, changed_by=user, notes=f"Refunded: {dto.reason}"
            )
        log.info("payment.refunded", amount=str(amount), full=full)
        return payment

    # ------------------------------------------------------------------
    # Settlement recorded on the order side
    # ------------------------------------------------------------------

    @transaction.atomic
    def record_order_capture(self, order_id: str) -> Optional[Payment]:
        """Mirror a capture recorded on the order (e.g. COD collected on delivery).

        The caller already holds the order lock.
        """
        if self._payments.captured_for_order(order_id) is not None:
            return None
        order = self._orders.get_order(order_id)
        payment = self._payments.open_for_order(order_id) or Payment(
            order=order,
            order_number=order.order_number,
            customer_id=order.customer_id,
            amount=order.total,
            method=order.payment_method,
        )
        payment.status = PaymentStatus.CAPTURED
        payment.captured_at = timezone.now()
        payment.add_domain_event(self._captured_event(payment, order))
        self._payments.save(payment)
        logger.info("payment.recorded_from_order", payment_id=str(payment.id), order_id=order_id)
        return payment

    @staticmethod
    def _captured_event(payment: Payment, order: Order) -> PaymentCaptured:
        return PaymentCaptured(
            aggregate_id=payment.id,
            order_id=str(order.id),
            order_number=order.order_number,
            amount=str(payment.amount),
            method=payment.method,
        )
