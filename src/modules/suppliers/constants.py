"""Supplier and purchase order constants, including the PO workflow."""

from django.db import models


class SupplierStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    PENDING = "pending", "Pending"
    SUSPENDED = "suspended", "Suspended"


class SupplierPaymentTerms(models.TextChoices):
    NET_7 = "net_7", "Net 7"
    NET_15 = "net_15", "Net 15"
    NET_30 = "net_30", "Net 30"
    NET_60 = "net_60", "Net 60"
    COD = "cod", "Cash on delivery"
    PREPAID = "prepaid", "Prepaid"


class PurchaseOrderStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PENDING = "pending", "Pending approval"
    APPROVED = "approved", "Approved"
    ORDERED = "ordered", "Ordered"
    PARTIALLY_RECEIVED = "partially_received", "Partially received"
    RECEIVED = "received", "Received"
    CANCELLED = "cancelled", "Cancelled"


class PurchasePaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PARTIAL = "partial", "Partially paid"
    PAID = "paid", "Paid"


# Moves allowed through the status endpoint.  Receipt is the only way
# into partially_received and received.
PO_TRANSITIONS: dict[str, set[str]] = {
    PurchaseOrderStatus.DRAFT: {PurchaseOrderStatus.PENDING, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.PENDING: {PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.APPROVED: {PurchaseOrderStatus.ORDERED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.ORDERED: {PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.PARTIALLY_RECEIVED: set(),
    PurchaseOrderStatus.RECEIVED: set(),
    PurchaseOrderStatus.CANCELLED: set(),
}

RECEIVABLE_STATES = frozenset(
    {
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.ORDERED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
    }
)
DELETABLE_STATES = frozenset({PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.CANCELLED})
CLOSED_STATES = frozenset({PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELLED})

# Suppliers in these states cannot be sent new purchase orders.
ORDERING_BLOCKED = frozenset({SupplierStatus.INACTIVE, SupplierStatus.SUSPENDED})

SUPPLIER_CURRENCIES = ("AED", "USD", "EUR")
