"""Order domain exceptions.

Product and stock failures come from the catalog and promo failures from
promotions; they are re-exported so order callers import one module.
"""

from __future__ import annotations

from modules.catalog.exceptions import (  # noqa: F401
    InactiveProduct,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
)
from modules.core.exceptions import ConflictError, DomainError, NotFoundError, PermissionDeniedError
from modules.promotions.exceptions import InvalidPromoCode  # noqa: F401


class OrderNotFound(NotFoundError):
    default_detail = "Order not found."


class InvalidOrderStatus(DomainError):
    default_detail = "Invalid order status transition."
    code = "invalid_order_status"


class StaleOrderStatus(ConflictError):
    """The client's ``expected_status`` no longer matches the stored one."""

    default_detail = "Order status has changed since it was read."
    code = "stale_order_status"


class BelowMinimumOrder(DomainError):
    default_detail = "Order is below the minimum amount."
    code = "below_minimum_order"


class ExpressNotAvailable(DomainError):
    default_detail = "Express delivery is not available for this address."
    code = "express_not_available"


class InvalidPaymentStatus(DomainError):
    default_detail = "Invalid payment status."
    code = "invalid_payment_status"


class OrderAccessDenied(PermissionDeniedError):
    default_detail = "You do not have access to this order."
