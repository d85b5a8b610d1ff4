"""Order service layer.

Checkout, the status workflow, cancellation and payment-status sync.
Every write runs in one transaction.  Status changes lock the order row
first, then check ``expected_status`` and the transition map, so two
concurrent admins cannot both move the same order.

Stock follows the order: reserved at checkout, committed (shipped out) on
delivery, released on cancellation or on a refund before delivery.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.db.models import Avg, Count, Sum
from django.utils import timezone

from modules.accounts.exceptions import AddressNotFound
from modules.catalog.exceptions import InactiveProduct, InvalidQuantity, ProductNotFound
from modules.catalog.models import effective_price
from modules.catalog.services import StockLine
from modules.core.models import ShopSettings
from modules.core.money import ZERO, round2
from modules.core.permissions import is_staff_user
from modules.orders import pricing
from modules.orders.constants import (
    NEXT_STATUS,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderPaymentCaptured,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    BelowMinimumOrder,
    ExpressNotAvailable,
    InvalidOrderStatus,
    InvalidPaymentStatus,
    OrderAccessDenied,
    OrderNotFound,
    StaleOrderStatus,
)
from modules.orders.models import Order

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IAddressRepository
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.catalog.services import StockService
    from modules.delivery.models import DeliveryZone
    from modules.delivery.repositories.interfaces import IDeliveryZoneRepository
    from modules.orders.dtos import (
        CancelOrderDTO,
        CreateOrderDTO,
        UpdateOrderStatusDTO,
        UpdatePaymentStatusDTO,
    )
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.promotions.models import DiscountCode
    from modules.promotions.services import PromotionService

logger = structlog.get_logger(__name__)


@dataclass
class DraftOrder:
    """Priced basket before anything is written."""

    items: List[Dict[str, Any]]
    totals: pricing.PriceBreakdown
    address: Dict[str, Any]
    zone: Optional[DeliveryZone]
    is_express: bool
    minimum_order: Decimal
    estimated_delivery_at: Any
    discount_code: Optional[DiscountCode] = None
    warnings: List[str] = field(default_factory=list)


class OrderService:
    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        zone_repository: IDeliveryZoneRepository,
        address_repository: IAddressRepository,
        stock_service: StockService,
        promotion_service: PromotionService,
    ) -> None:
        self._orders = order_repository
        self._products = product_repository
        self._zones = zone_repository
        self._addresses = address_repository
        self._stock = stock_service
        self._promotions = promotion_service

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def _resolve_address(self, customer: User, dto: CreateOrderDTO) -> Dict[str, Any]:
        if dto.address_id is not None:
            address = self._addresses.get_by_id(str(dto.address_id))
            if address is None or address.user_id != customer.id:
                raise AddressNotFound()
            return address.as_snapshot()
        snapshot = dto.delivery_address.model_dump(mode="json", exclude={"is_default"})
        return snapshot

    def price(self, customer: User, dto: CreateOrderDTO) -> DraftOrder:
        """Validate and price the basket without writing anything."""
        products = self._products.get_many(str(item.product_id) for item in dto.items)
        items: List[Dict[str, Any]] = []
        for item in dto.items:
            product = products.get(str(item.product_id))
            if product is None:
                raise ProductNotFound(f"Product {item.product_id} not found.")
            if not product.is_active:
                raise InactiveProduct(f"Product {product.name} is not available.")
            if not product.min_order_quantity <= item.quantity <= product.max_order_quantity:
                raise InvalidQuantity(
                    f"Quantity for {product.name} must be between "
                    f"{product.min_order_quantity} and {product.max_order_quantity} {product.unit}."
                )
            unit_price = effective_price(product)
            items.append(
                {
                    "product": product,
                    "product_name": product.name,
                    "sku": product.sku,
                    "unit": product.unit,
                    "quantity": item.quantity,
                    "unit_price": unit_price,
                    "notes": item.notes,
                }
            )

        shop = ShopSettings.load()
        lines = [(item["quantity"], item["unit_price"]) for item in items]
        sub = pricing.subtotal(lines)

        discount = ZERO
        discount_code = None
        if dto.discount_code:
            applied = self._promotions.validate(dto.discount_code, sub, user_id=str(customer.id))
            discount, discount_code = applied.discount, applied.discount_code

        address = self._resolve_address(customer, dto)
        zone = pricing.match_zone(
            list(self._zones.active()), address.get("emirate", ""), address.get("area")
        )
        if dto.is_express and zone is not None and not zone.express_enabled:
            raise ExpressNotAvailable()

        fee = pricing.delivery_fee(sub, discount, shop, zone=zone, is_express=dto.is_express)
        totals = pricing.breakdown(lines, discount, fee, dto.driver_tip, shop.vat_rate)
        return DraftOrder(
            items=items,
            totals=totals,
            address=address,
            zone=zone,
            is_express=dto.is_express,
            minimum_order=pricing.minimum_order(shop, zone),
            estimated_delivery_at=pricing.estimated_delivery_at(
                timezone.now(), zone, dto.is_express
            ),
            discount_code=discount_code,
        )

    def quote(self, customer: User, dto: CreateOrderDTO) -> DraftOrder:
        draft = self.price(customer, dto)
        net = draft.totals.subtotal - draft.totals.discount
        if net < draft.minimum_order:
            draft.warnings.append(f"Minimum order of {draft.minimum_order} AED required")
        return draft

    @transaction.atomic
    def create_order(self, customer: User, dto: CreateOrderDTO) -> tuple[Order, bool]:
        """Place an order.

        Returns ``(order, created)``; ``created`` is ``False`` when the
        ``Idempotency-Key`` was already used and the original order is
        returned unchanged.
        """
        log = logger.bind(customer_id=str(customer.id))
        if dto.idempotency_key:
            existing = self._orders.get_by_idempotency_key(dto.idempotency_key)
            if existing is not None:
                self.check_access(customer, existing)
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return existing, False

        draft = self.price(customer, dto)
        net = draft.totals.subtotal - draft.totals.discount
        if net < draft.minimum_order:
            log.info("order.below_minimum", net=str(net), minimum=str(draft.minimum_order))
            raise BelowMinimumOrder(f"Minimum order of {draft.minimum_order} AED required")

        order = Order(
            customer=customer,
            discount_code=draft.discount_code.code if draft.discount_code else "",
            payment_method=dto.payment_method,
            delivery_address=draft.address,
            delivery_zone=draft.zone,
            is_express=draft.is_express,
            estimated_delivery_at=draft.estimated_delivery_at,
            notes=dto.notes,
            idempotency_key=dto.idempotency_key,
            **draft.totals.as_dict(),
        )
        order.save()
        self._orders.add_items(order, draft.items)
        self._stock.reserve(
            [StockLine(str(item["product"].id), item["quantity"]) for item in draft.items],
            order_id=str(order.id),
        )
        if draft.discount_code is not None:
            self._promotions.redeem(draft.discount_code)

        self._orders.add_history(
            order, OrderStatus.PENDING, changed_by=customer, notes="Order placed"
        )
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(customer.id),
                total=str(order.total),
            )
        )
        self._orders.save(order)
        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
            item_count=len(draft.items),
        )
        return self._orders.get_by_id(str(order.id)), True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        order = self._orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound()
        return order

    def get_order_for(self, user: User, order_id: str) -> Order:
        order = self.get_order(order_id)
        self.check_access(user, order)
        return order

    def get_by_number_for(self, user: User, order_number: str) -> Order:
        order = self._orders.get_by_number(order_number)
        if order is None:
            raise OrderNotFound()
        self.check_access(user, order)
        return order

    def check_access(self, user: User, order: Order) -> None:
        if is_staff_user(user) or order.customer_id == user.id:
            return
        raise OrderAccessDenied()

    def list_orders_for(self, user: User):
        if is_staff_user(user):
            return self._orders.list()
        return self._orders.list({"customer": user})

    def stats(self) -> dict:
        queryset = self._orders.list()
        now = timezone.localtime()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=today.weekday())
        month_start = today.replace(day=1)

        by_status = {value: 0 for value in OrderStatus.values}
        for row in queryset.order_by().values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]

        billable = queryset.exclude(status=OrderStatus.CANCELLED)

        def window(start) -> dict:
            agg = billable.filter(created_at__gte=start).aggregate(
                count=Count("id"), sales=Sum("total")
            )
            return {"orders": agg["count"], "sales": round2(agg["sales"] or ZERO)}

        totals = billable.aggregate(count=Count("id"), revenue=Sum("total"), average=Avg("total"))
        return {
            "total_orders": queryset.count(),
            "by_status": by_status,
            "today": window(today),
            "week": window(week_start),
            "month": window(month_start),
            "total_revenue": round2(totals["revenue"] or ZERO),
            "average_order_value": round2(totals["average"] or ZERO),
            "pending_payments": queryset.filter(payment_status=PaymentStatus.PENDING)
            .exclude(status=OrderStatus.CANCELLED)
            .count(),
        }

    # ------------------------------------------------------------------
    # Status workflow
    # ------------------------------------------------------------------

    def _lock(self, order_id: str, expected_status: str | None = None) -> Order:
        order = self._orders.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound()
        if expected_status is not None and order.status != expected_status:
            logger.warning(
                "order.stale_status",
                order_id=str(order.id),
                expected=expected_status,
                actual=order.status,
            )
            raise StaleOrderStatus(
                f"Order is now {order.status}, not {expected_status}. Reload and retry."
            )
        return order

    def _stock_lines(self, order: Order) -> List[StockLine]:
        return [StockLine(str(item.product_id), item.quantity) for item in order.items.all()]

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        dto: UpdateOrderStatusDTO,
        changed_by: User | None = None,
    ) -> Order:
        order = self._lock(order_id, dto.expected_status)
        self._transition(order, dto.status, changed_by=changed_by, notes=dto.notes)
        return self.get_order(str(order.id))

    @transaction.atomic
    def advance(
        self, order_id: str, changed_by: User | None = None, expected_status: str | None = None
    ) -> Order:
        order = self._lock(order_id, expected_status)
        next_status = NEXT_STATUS.get(order.status)
        if next_status is None:
            raise InvalidOrderStatus(f"Order in status {order.status} cannot be advanced.")
        self._transition(order, next_status, changed_by=changed_by)
        return self.get_order(str(order.id))

    @transaction.atomic
    def cancel_order(
        self, order_id: str, user: User, dto: CancelOrderDTO
    ) -> Order:
        """Cancel and release the stock reservation.

        Customers may cancel their own orders while pending; staff may
        cancel anything not yet delivered.
        """
        order = self._lock(order_id, dto.expected_status)
        self.check_access(user, order)
        if not is_staff_user(user) and order.status != OrderStatus.PENDING:
            raise InvalidOrderStatus("Orders can only be cancelled while pending.")
        notes = f"Cancelled: {dto.reason}" if dto.reason else "Order cancelled"
        self._transition(order, OrderStatus.CANCELLED, changed_by=user, notes=notes)
        return self.get_order(str(order.id))

    def transition_locked(
        self, order: Order, new_status: str, changed_by: User | None = None, notes: str = ""
    ) -> Order:
        """Move an order the caller already locked (delivery and payments use this)."""
        return self._transition(order, new_status, changed_by=changed_by, notes=notes)

    def lock_order(self, order_id: str) -> Order:
        return self._lock(order_id)

    def _transition(
        self, order: Order, new_status: str, changed_by: User | None = None, notes: str = ""
    ) -> Order:
        log = logger.bind(order_id=str(order.id), old_status=order.status, new_status=new_status)
        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(f"Cannot change order from {order.status} to {new_status}.")

        old_status = order.status
        order.status = new_status
        payment_captured = False

        if new_status == OrderStatus.CONFIRMED:
            order.assign_invoice_number()
        elif new_status == OrderStatus.DELIVERED:
            order.actual_delivery_at = timezone.now()
            if order.payment_status == PaymentStatus.PENDING:
                order.payment_status = PaymentStatus.CAPTURED
                payment_captured = True
            self._stock.commit(self._stock_lines(order), order_id=str(order.id))
        elif new_status == OrderStatus.CANCELLED or (
            new_status == OrderStatus.REFUNDED and old_status != OrderStatus.DELIVERED
        ):
            self._stock.release(self._stock_lines(order), order_id=str(order.id))

        self._orders.add_history(
            order, new_status, old_status=old_status, changed_by=changed_by, notes=notes
        )
        if new_status == OrderStatus.CANCELLED:
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    customer_id=str(order.customer_id),
                    reason=notes,
                )
            )
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(order.customer_id),
                old_status=old_status,
                new_status=new_status,
                total=str(order.total),
            )
        )
        if payment_captured:
            order.add_domain_event(
                OrderPaymentCaptured(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    amount=str(order.total),
                    method=order.payment_method,
                )
            )
        self._orders.save(order)
        log.info("order.status_updated")
        return order

    # ------------------------------------------------------------------
    # Payment status
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_payment_status(
        self, order_id: str, dto: UpdatePaymentStatusDTO, changed_by: User | None = None
    ) -> Order:
        """Back-office override of the payment status.

        Setting ``captured`` records the settlement on the payment ledger.
        """
        order = self._lock(order_id)
        if order.status == OrderStatus.CANCELLED and dto.payment_status in (
            PaymentStatus.AUTHORIZED,
            PaymentStatus.CAPTURED,
        ):
            raise InvalidPaymentStatus("A cancelled order cannot be marked as paid.")
        previous = order.payment_status
        self.sync_payment_status(
            order,
            dto.payment_status,
            changed_by=changed_by,
            notes=dto.notes or f"Payment status changed from {previous} to {dto.payment_status}",
        )
        if dto.payment_status == PaymentStatus.CAPTURED and previous != PaymentStatus.CAPTURED:
            order.add_domain_event(
                OrderPaymentCaptured(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    amount=str(order.total),
                    method=order.payment_method,
                )
            )
            self._orders.save(order)
        return self.get_order(str(order.id))

    def sync_payment_status(
        self,
        order: Order,
        payment_status: str,
        changed_by: User | None = None,
        notes: str = "",
    ) -> Order:
        """Record ``payment_status`` on a locked order with a history note."""
        order.payment_status = payment_status
        order.save(update_fields=["payment_status"])
        self._orders.add_history(
            order,
            order.status,
            old_status=order.status,
            changed_by=changed_by,
            notes=notes or f"Payment {payment_status}",
        )
        logger.info(
            "order.payment_status_updated",
            order_id=str(order.id),
            payment_status=payment_status,
        )
        return order

    # ------------------------------------------------------------------

    @transaction.atomic
    def delete_order(self, order_id: str, changed_by: User | None = None) -> None:
        """Soft-delete an order, cancelling it first if it still holds stock."""
        order = self._lock(order_id)
        if order.can_transition_to(OrderStatus.CANCELLED):
            self._transition(
                order, OrderStatus.CANCELLED, changed_by=changed_by, notes="Order deleted"
            )
        order.delete()
        logger.info("order.deleted", order_id=str(order_id))
