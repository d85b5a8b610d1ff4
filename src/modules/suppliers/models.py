"""Suppliers, the products they sell us, and purchase orders.

- ``Supplier.code`` (``SUP-NNN``) and ``PurchaseOrder.order_number``
  (``PO-YYYY-NNNN``) are drawn from ``DocumentSequence`` on first save.
- Contacts live on the supplier as a JSON list; each carries its own id.
- A purchase order snapshots the supplier name and the VAT rate in force
  when it was raised.  ``received_amount`` is the cost of the goods booked
  in so far and ``paid_amount`` what has been paid for them.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.db import models, transaction
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.core.money import ZERO, money_sum, round2
from modules.suppliers.constants import (
    ORDERING_BLOCKED,
    PO_TRANSITIONS,
    PurchaseOrderStatus,
    PurchasePaymentStatus,
    SupplierPaymentTerms,
    SupplierStatus,
)
from shared.domain.events import DomainEventMixin


def _money(**kwargs: Any) -> models.DecimalField:
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class DocumentSequence(models.Model):
    """Last number handed out per key (``SUP`` or ``PO-YYYY``)."""

    key = models.CharField(max_length=20, primary_key=True)
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "supplier_sequences"

    @classmethod
    def next_number(cls, key: str) -> int:
        with transaction.atomic():
            sequence, _ = cls.objects.select_for_update().get_or_create(key=key)
            sequence.last_number += 1
            sequence.save(update_fields=["last_number"])
        return sequence.last_number

    def __str__(self) -> str:
        return f"{self.key}: {self.last_number}"


class Supplier(SoftDeleteModel):
    code = models.CharField(max_length=20, unique=True, editable=False)
    name = models.CharField(max_length=200)
    name_ar = models.CharField(max_length=200, blank=True, default="")
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    website = models.URLField(blank=True, default="")
    tax_number = models.CharField(max_length=30, blank=True, default="")
    address = models.JSONField(default=dict)
    contacts = models.JSONField(default=list, blank=True)
    payment_terms = models.CharField(
        max_length=10, choices=SupplierPaymentTerms.choices, default=SupplierPaymentTerms.NET_30
    )
    currency = models.CharField(max_length=3, default="AED")
    credit_limit = _money()
    current_balance = _money()
    categories = models.JSONField(default=list, blank=True)
    total_orders = models.PositiveIntegerField(default=0)
    total_spent = _money()
    status = models.CharField(
        max_length=10, choices=SupplierStatus.choices, default=SupplierStatus.PENDING
    )
    notes = models.TextField(blank=True, default="")
    last_order_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "suppliers"
        ordering = ["name"]
        indexes = [models.Index(fields=["status"], name="suppliers_status_idx")]

    @property
    def can_order(self) -> bool:
        return self.status not in ORDERING_BLOCKED

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.code:
            self.code = f"SUP-{DocumentSequence.next_number('SUP'):03d}"
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code} {self.name}"


class SupplierProduct(BaseModel):
    """A catalog product as offered by one supplier."""

    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name="products")
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.CASCADE, related_name="supplier_offers"
    )
    supplier_sku = models.CharField(max_length=64, blank=True, default="")
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2)
    minimum_order_quantity = models.DecimalField(
        max_digits=10, decimal_places=3, default=Decimal("1")
    )
    lead_time_days = models.PositiveIntegerField(default=7)
    is_preferred = models.BooleanField(default=False)
    last_purchase_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    last_purchase_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "supplier_products"
        ordering = ["product__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["supplier", "product"], name="supplier_products_unique_product"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.supplier_id}/{self.product_id} @ {self.unit_cost}"


class PurchaseOrder(DomainEventMixin, BaseModel):
    order_number = models.CharField(max_length=20, unique=True, editable=False)
    supplier = models.ForeignKey(
        Supplier, on_delete=models.PROTECT, related_name="purchase_orders"
    )
    supplier_name = models.CharField(max_length=200)

    subtotal = _money()
    tax_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0.05"))
    tax_amount = _money()
    shipping_cost = _money()
    discount = _money()
    total = _money()
    received_amount = _money()
    paid_amount = _money()

    status = models.CharField(
        max_length=20, choices=PurchaseOrderStatus.choices, default=PurchaseOrderStatus.DRAFT
    )
    payment_status = models.CharField(
        max_length=10,
        choices=PurchasePaymentStatus.choices,
        default=PurchasePaymentStatus.PENDING,
    )

    expected_delivery_date = models.DateField()
    actual_delivery_date = models.DateTimeField(null=True, blank=True)
    delivery_address = models.TextField()
    delivery_notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_created",
    )
    approved_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    internal_notes = models.TextField(blank=True, default="")
    status_history = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "purchase_orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="purchase_orders_status_idx"),
            models.Index(fields=["supplier", "-created_at"], name="purchase_orders_supplier_idx"),
        ]

    @property
    def outstanding(self) -> Decimal:
        """Cost of goods received but not yet paid for."""
        return round2(self.received_amount - self.paid_amount)

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in PO_TRANSITIONS.get(self.status, set())

    def calculate_totals(self) -> None:
        self.subtotal = money_sum(item.total_cost for item in self.items.all())
        self.tax_amount = round2(self.subtotal * self.tax_rate)
        self.total = round2(self.subtotal + self.tax_amount + self.shipping_cost - self.discount)

    def refresh_payment_status(self) -> None:
        if self.paid_amount <= ZERO:
            self.payment_status = PurchasePaymentStatus.PENDING
        elif self.paid_amount >= self.total:
            self.payment_status = PurchasePaymentStatus.PAID
        else:
            self.payment_status = PurchasePaymentStatus.PARTIAL

    def record_status(self, status: str, changed_by=None, notes: str = "") -> None:
        self.status = status
        self.status_history = [
            *self.status_history,
            {
                "status": status,
                "changed_by": str(changed_by.id) if changed_by else None,
                "changed_at": timezone.now().isoformat(),
                "notes": notes,
            },
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            year = timezone.now().year
            self.order_number = f"PO-{year}-{DocumentSequence.next_number(f'PO-{year}'):04d}"
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class PurchaseOrderItem(BaseModel):
    purchase_order = models.ForeignKey(
        PurchaseOrder, on_delete=models.CASCADE, related_name="items"
    )
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.PROTECT, related_name="purchase_order_items"
    )
    product_name = models.CharField(max_length=255)
    supplier_sku = models.CharField(max_length=64, blank=True, default="")
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, editable=False)
    received_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    notes = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "purchase_order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(quantity__gt=0), name="purchase_order_items_quantity_positive"
            ),
            models.CheckConstraint(
                check=models.Q(received_quantity__lte=models.F("quantity")),
                name="purchase_order_items_not_over_received",
            ),
        ]

    @property
    def remaining_quantity(self) -> Decimal:
        return self.quantity - self.received_quantity

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total_cost = round2(self.quantity * self.unit_cost)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.total_cost})"
