"""Supplier management and the purchase order workflow.

A purchase order moves draft -> pending -> approved -> ordered through
``update_status``; goods are booked in with ``receive``, which can run
several times until every line is complete.  Each receipt adds stock and
raises ``PurchaseOrderReceived`` so finance posts the purchase; ``pay``
settles goods taken on credit and raises ``PurchaseOrderPaid``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from django.db import transaction
from django.db.models import Count, DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from uuid6 import uuid7

from modules.catalog.services import StockLine
from modules.core.models import ShopSettings
from modules.core.money import ZERO, round2
from modules.suppliers.constants import (
    CLOSED_STATES,
    DELETABLE_STATES,
    RECEIVABLE_STATES,
    PurchaseOrderStatus,
    SupplierStatus,
)
from modules.suppliers.events import PurchaseOrderPaid, PurchaseOrderReceived
from modules.suppliers.exceptions import (
    ContactNotFound,
    DuplicateSupplierProduct,
    InvalidPurchaseOrder,
    InvalidPurchaseOrderStatus,
    InvalidSupplierPayment,
    OverReceipt,
    ProductNotFound,
    PurchaseOrderItemNotFound,
    PurchaseOrderNotFound,
    SupplierHasOpenOrders,
    SupplierNotFound,
    SupplierProductNotFound,
    SupplierUnavailable,
)
from modules.suppliers.models import PurchaseOrder, Supplier, SupplierProduct

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.catalog.services import StockService
    from modules.suppliers.dtos import (
        ContactDTO,
        CreatePurchaseOrderDTO,
        PaySupplierDTO,
        PurchaseOrderStatusDTO,
        ReceivePurchaseOrderDTO,
        SupplierDTO,
        SupplierProductDTO,
        UpdateSupplierDTO,
        UpdateSupplierProductDTO,
    )
    from modules.suppliers.repositories.interfaces import (
        IPurchaseOrderRepository,
        ISupplierRepository,
    )

logger = structlog.get_logger(__name__)

MONEY = DecimalField(max_digits=14, decimal_places=2)


class SupplierService:
    def __init__(
        self,
        supplier_repository: ISupplierRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._suppliers = supplier_repository
        self._products = product_repository

    def list_suppliers(self):
        return self._suppliers.list()

    def get_supplier(self, id: str) -> Supplier:
        supplier = self._suppliers.get_by_id(id)
        if supplier is None:
            raise SupplierNotFound()
        return supplier

    def _locked(self, id: str) -> Supplier:
        supplier = self._suppliers.get_for_update(id)
        if supplier is None:
            raise SupplierNotFound()
        return supplier

    @transaction.atomic
    def create_supplier(self, dto: SupplierDTO) -> Supplier:
        data = dto.model_dump(mode="json", exclude={"contacts", "credit_limit"})
        supplier = Supplier(**data, credit_limit=dto.credit_limit)
        supplier.contacts = _with_single_primary(
            [_new_contact(contact) for contact in dto.contacts]
        )
        self._suppliers.save(supplier)
        logger.info("supplier.created", supplier_id=str(supplier.id), code=supplier.code)
        return supplier

    @transaction.atomic
    def update_supplier(self, id: str, dto: UpdateSupplierDTO) -> Supplier:
        supplier = self._locked(id)
        changes = dto.model_dump(mode="json", exclude_none=True, exclude={"credit_limit"})
        for field, value in changes.items():
            setattr(supplier, field, value)
        if dto.credit_limit is not None:
            supplier.credit_limit = dto.credit_limit
        self._suppliers.save(supplier)
        logger.info("supplier.updated", supplier_id=id, fields=sorted(dto.model_fields_set))
        return supplier

    @transaction.atomic
    def set_status(self, id: str, status: str) -> Supplier:
        supplier = self._locked(id)
        old_status = supplier.status
        supplier.status = status
        self._suppliers.save(supplier)
        logger.info("supplier.status_changed", supplier_id=id, old=old_status, new=status)
        return supplier

    @transaction.atomic
    def delete_supplier(self, id: str) -> None:
        supplier = self._locked(id)
        if self._suppliers.has_open_orders(supplier):
            raise SupplierHasOpenOrders()
        self._suppliers.delete(supplier)
        logger.info("supplier.deleted", supplier_id=id)

    @transaction.atomic
    def add_contact(self, id: str, dto: ContactDTO) -> Supplier:
        supplier = self._locked(id)
        contact = _new_contact(dto)
        contacts = list(supplier.contacts)
        if contact["is_primary"]:
            contacts = [{**existing, "is_primary": False} for existing in contacts]
        supplier.contacts = [*contacts, contact]
        self._suppliers.save(supplier)
        return supplier

    @transaction.atomic
    def remove_contact(self, id: str, contact_id: str) -> Supplier:
        supplier = self._locked(id)
        remaining = [contact for contact in supplier.contacts if contact.get("id") != contact_id]
        if len(remaining) == len(supplier.contacts):
            raise ContactNotFound()
        supplier.contacts = remaining
        self._suppliers.save(supplier)
        return supplier

    def stats(self) -> dict:
        suppliers = self._suppliers.list()
        totals = suppliers.aggregate(
            spent=Coalesce(Sum("total_spent"), Value(ZERO), output_field=MONEY),
            owed=Coalesce(Sum("current_balance"), Value(ZERO), output_field=MONEY),
        )
        by_status = dict(
            suppliers.order_by().values_list("status").annotate(count=Count("id"))
        )
        open_orders = PurchaseOrder.objects.exclude(status__in=CLOSED_STATES).aggregate(
            count=Count("id"),
            value=Coalesce(Sum("total"), Value(ZERO), output_field=MONEY),
        )
        return {
            "total_suppliers": suppliers.count(),
            "by_status": {status: by_status.get(status, 0) for status in SupplierStatus.values},
            "total_spent": round2(totals["spent"]),
            "outstanding_balance": round2(totals["owed"]),
            "open_purchase_orders": open_orders["count"],
            "open_purchase_order_value": round2(open_orders["value"]),
        }

    # ------------------------------------------------------------------
    # Products the supplier sells
    # ------------------------------------------------------------------

    def list_products(self, supplier_id: str):
        supplier = self.get_supplier(supplier_id)
        return self._suppliers.offers(str(supplier.id))

    @transaction.atomic
    def add_product(self, supplier_id: str, dto: SupplierProductDTO) -> SupplierProduct:
        supplier = self.get_supplier(supplier_id)
        product = self._products.get_by_id(str(dto.product_id))
        if product is None:
            raise ProductNotFound()
        if self._suppliers.offers_for_products(str(supplier.id), [str(product.id)]):
            raise DuplicateSupplierProduct()
        offer = self._suppliers.save_offer(
            SupplierProduct(
                supplier=supplier,
                product=product,
                **dto.model_dump(exclude={"product_id"}),
            )
        )
        logger.info(
            "supplier.product_added", supplier_id=supplier_id, product_id=str(product.id)
        )
        return offer

    def _offer(self, offer_id: str) -> SupplierProduct:
        offer = self._suppliers.get_offer(offer_id)
        if offer is None:
            raise SupplierProductNotFound()
        return offer

    @transaction.atomic
    def update_product(self, offer_id: str, dto: UpdateSupplierProductDTO) -> SupplierProduct:
        offer = self._offer(offer_id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(offer, field, value)
        return self._suppliers.save_offer(offer)

    @transaction.atomic
    def remove_product(self, offer_id: str) -> None:
        self._suppliers.delete_offer(self._offer(offer_id))


def _new_contact(dto: ContactDTO) -> dict:
    return {"id": str(uuid7()), **dto.model_dump(mode="json")}


def _with_single_primary(contacts: list[dict]) -> list[dict]:
    """Keep only the last contact flagged primary as primary."""
    primary = next(
        (contact["id"] for contact in reversed(contacts) if contact["is_primary"]), None
    )
    return [{**contact, "is_primary": contact["id"] == primary} for contact in contacts]


class PurchaseOrderService:
    def __init__(
        self,
        purchase_order_repository: IPurchaseOrderRepository,
        supplier_repository: ISupplierRepository,
        product_repository: IProductRepository,
        stock_service: StockService,
    ) -> None:
        self._orders = purchase_order_repository
        self._suppliers = supplier_repository
        self._products = product_repository
        self._stock = stock_service

    def list_orders(self):
        return self._orders.list()

    def get_order(self, id: str) -> PurchaseOrder:
        purchase_order = self._orders.get_by_id(id)
        if purchase_order is None:
            raise PurchaseOrderNotFound()
        return purchase_order

    def _locked(self, id: str) -> PurchaseOrder:
        purchase_order = self._orders.get_for_update(id)
        if purchase_order is None:
            raise PurchaseOrderNotFound()
        return purchase_order

    @transaction.atomic
    def create_order(
        self, dto: CreatePurchaseOrderDTO, created_by: User | None = None
    ) -> PurchaseOrder:
        supplier = self._suppliers.get_for_update(str(dto.supplier_id))
        if supplier is None:
            raise SupplierNotFound()
        if not supplier.can_order:
            raise SupplierUnavailable(f"Cannot order from a {supplier.status} supplier.")

        product_ids = [str(item.product_id) for item in dto.items]
        products = self._products.get_many(product_ids)
        offers = self._suppliers.offers_for_products(str(supplier.id), product_ids)
        lines = []
        for item in dto.items:
            product = products.get(str(item.product_id))
            if product is None:
                raise ProductNotFound(f"Product {item.product_id} not found.")
            offer = offers.get(str(product.id))
            unit_cost = item.unit_cost
            if unit_cost is None:
                unit_cost = offer.unit_cost if offer else product.cost_price
            if unit_cost is None:
                raise InvalidPurchaseOrder(f"No unit cost known for {product.name}.")
            lines.append(
                {
                    "product": product,
                    "product_name": product.name,
                    "supplier_sku": offer.supplier_sku if offer else "",
                    "quantity": item.quantity,
                    "unit_cost": unit_cost,
                    "notes": item.notes,
                }
            )

        purchase_order = PurchaseOrder(
            supplier=supplier,
            supplier_name=supplier.name,
            tax_rate=ShopSettings.load().vat_rate,
            shipping_cost=dto.shipping_cost,
            discount=dto.discount,
            expected_delivery_date=dto.expected_delivery_date,
            delivery_address=dto.delivery_address,
            delivery_notes=dto.delivery_notes,
            internal_notes=dto.internal_notes,
            created_by=created_by,
        )
        purchase_order.record_status(
            PurchaseOrderStatus.DRAFT, created_by, "Purchase order created"
        )
        self._orders.save(purchase_order)
        self._orders.add_items(purchase_order, lines)
        purchase_order.calculate_totals()
        if purchase_order.total < ZERO:
            raise InvalidPurchaseOrder("Discount cannot exceed the order value.")
        self._orders.save(purchase_order)

        supplier.total_orders += 1
        supplier.last_order_at = timezone.now()
        self._suppliers.save(supplier)
        logger.info(
            "purchase_order.created",
            purchase_order_id=str(purchase_order.id),
            order_number=purchase_order.order_number,
            supplier_id=str(supplier.id),
            total=str(purchase_order.total),
        )
        return purchase_order

    @transaction.atomic
    def update_status(
        self, id: str, dto: PurchaseOrderStatusDTO, changed_by: User | None = None
    ) -> PurchaseOrder:
        purchase_order = self._locked(id)
        old_status = purchase_order.status
        if not purchase_order.can_transition_to(dto.status):
            raise InvalidPurchaseOrderStatus(
                f"Cannot move a {old_status} purchase order to {dto.status}."
            )
        if dto.status == PurchaseOrderStatus.APPROVED:
            purchase_order.approved_by = changed_by
            purchase_order.approved_at = timezone.now()
        purchase_order.record_status(dto.status, changed_by, dto.notes)
        self._orders.save(purchase_order)
        logger.info(
            "purchase_order.status_changed",
            purchase_order_id=id,
            old=old_status,
            new=dto.status,
        )
        return purchase_order

    @transaction.atomic
    def receive(
        self, id: str, dto: ReceivePurchaseOrderDTO, received_by: User | None = None
    ) -> PurchaseOrder:
        """Book delivered goods into stock and post their cost.

        The last receipt posts whatever is left of the order total, so
        shipping and discount land once and rounding never drifts.
        """
        purchase_order = self._locked(id)
        if purchase_order.status not in RECEIVABLE_STATES:
            raise InvalidPurchaseOrderStatus(
                f"Cannot receive goods on a {purchase_order.status} purchase order."
            )
        items = {str(item.id): item for item in purchase_order.items.all()}

        goods = Decimal("0")
        lines = []
        for line in dto.items:
            item = items.get(str(line.item_id))
            if item is None:
                raise PurchaseOrderItemNotFound()
            if line.quantity > item.remaining_quantity:
                raise OverReceipt(
                    f"Cannot receive {line.quantity} of {item.product_name}; "
                    f"{item.remaining_quantity} outstanding."
                )
            item.received_quantity += line.quantity
            item.save(update_fields=["received_quantity"])
            goods += line.quantity * item.unit_cost
            lines.append(StockLine(str(item.product_id), line.quantity))

        self._stock.receive(lines, str(purchase_order.id), performed_by=received_by)

        fully_received = all(item.remaining_quantity <= 0 for item in items.values())
        if fully_received:
            amount = max(round2(purchase_order.total - purchase_order.received_amount), ZERO)
            purchase_order.actual_delivery_date = timezone.now()
            status = PurchaseOrderStatus.RECEIVED
        else:
            amount = round2(goods * (1 + purchase_order.tax_rate))
            status = PurchaseOrderStatus.PARTIALLY_RECEIVED

        purchase_order.received_amount = round2(purchase_order.received_amount + amount)
        if dto.account_id is not None:
            purchase_order.paid_amount = round2(purchase_order.paid_amount + amount)
        purchase_order.refresh_payment_status()
        purchase_order.record_status(status, received_by, dto.notes)
        if amount > ZERO:
            purchase_order.add_domain_event(
                PurchaseOrderReceived(
                    aggregate_id=purchase_order.id,
                    order_number=purchase_order.order_number,
                    supplier_name=purchase_order.supplier_name,
                    amount=str(amount),
                    account_id=str(dto.account_id) if dto.account_id else "",
                    fully_received=fully_received,
                )
            )
        self._orders.save(purchase_order)

        self._record_supplier_spend(purchase_order, amount, paid=dto.account_id is not None)
        self._note_purchase_prices(purchase_order, [items[str(line.item_id)] for line in dto.items])
        logger.info(
            "purchase_order.received",
            purchase_order_id=id,
            amount=str(amount),
            fully_received=fully_received,
        )
        return purchase_order

    @transaction.atomic
    def pay(self, id: str, dto: PaySupplierDTO, paid_by: User | None = None) -> PurchaseOrder:
        purchase_order = self._locked(id)
        outstanding = purchase_order.outstanding
        if outstanding <= ZERO:
            raise InvalidSupplierPayment("Nothing is owed on this purchase order.")
        amount = round2(dto.amount) if dto.amount is not None else outstanding
        if amount > outstanding:
            raise InvalidSupplierPayment(
                f"Payment of {amount} exceeds the {outstanding} owed on this purchase order."
            )

        purchase_order.paid_amount = round2(purchase_order.paid_amount + amount)
        purchase_order.refresh_payment_status()
        purchase_order.add_domain_event(
            PurchaseOrderPaid(
                aggregate_id=purchase_order.id,
                order_number=purchase_order.order_number,
                supplier_name=purchase_order.supplier_name,
                amount=str(amount),
                account_id=str(dto.account_id),
            )
        )
        self._orders.save(purchase_order)

        supplier = self._suppliers.get_for_update(str(purchase_order.supplier_id))
        if supplier is not None:
            supplier.current_balance = round2(supplier.current_balance - amount)
            self._suppliers.save(supplier)
        logger.info("purchase_order.paid", purchase_order_id=id, amount=str(amount))
        return purchase_order

    @transaction.atomic
    def delete_order(self, id: str) -> None:
        purchase_order = self._locked(id)
        if purchase_order.status not in DELETABLE_STATES:
            raise InvalidPurchaseOrderStatus(
                "Only draft or cancelled purchase orders can be deleted."
            )
        self._orders.delete(purchase_order)
        logger.info("purchase_order.deleted", purchase_order_id=id)

    # ------------------------------------------------------------------

    def _record_supplier_spend(
        self, purchase_order: PurchaseOrder, amount: Decimal, paid: bool
    ) -> None:
        supplier = self._suppliers.get_for_update(str(purchase_order.supplier_id))
        if supplier is None:
            return
        supplier.total_spent = round2(supplier.total_spent + amount)
        if not paid:
            supplier.current_balance = round2(supplier.current_balance + amount)
        self._suppliers.save(supplier)

    def _note_purchase_prices(self, purchase_order: PurchaseOrder, items) -> None:
        offers = self._suppliers.offers_for_products(
            str(purchase_order.supplier_id), [str(item.product_id) for item in items]
        )
        received_at = timezone.now()
        for item in items:
            offer = offers.get(str(item.product_id))
            if offer is None:
                continue
            offer.last_purchase_price = item.unit_cost
            offer.last_purchase_date = received_at
            self._suppliers.save_offer(offer)
