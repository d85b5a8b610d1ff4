"""Supplier and purchase order exceptions."""

from modules.catalog.exceptions import ProductNotFound  # noqa: F401
from modules.core.exceptions import ConflictError, DomainError, NotFoundError


class SupplierNotFound(NotFoundError):
    default_detail = "Supplier not found."


class ContactNotFound(NotFoundError):
    default_detail = "Contact not found."


class SupplierProductNotFound(NotFoundError):
    default_detail = "Supplier product not found."


class PurchaseOrderNotFound(NotFoundError):
    default_detail = "Purchase order not found."


class PurchaseOrderItemNotFound(NotFoundError):
    default_detail = "Purchase order item not found."


class DuplicateSupplierProduct(ConflictError):
    default_detail = "The supplier already lists this product."
    code = "duplicate_supplier_product"


class SupplierHasOpenOrders(ConflictError):
    default_detail = "Cannot delete supplier with pending purchase orders."
    code = "supplier_has_open_orders"


class SupplierUnavailable(DomainError):
    default_detail = "Supplier is not available for ordering."
    code = "supplier_unavailable"


class InvalidPurchaseOrder(DomainError):
    default_detail = "Invalid purchase order."
    code = "invalid_purchase_order"


class InvalidPurchaseOrderStatus(DomainError):
    default_detail = "Invalid purchase order status transition."
    code = "invalid_purchase_order_status"


class OverReceipt(DomainError):
    default_detail = "Received quantity exceeds the quantity ordered."
    code = "over_receipt"


class InvalidSupplierPayment(DomainError):
    default_detail = "Invalid supplier payment."
    code = "invalid_supplier_payment"
