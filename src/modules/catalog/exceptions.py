"""Catalog domain exceptions."""

from rest_framework import status

from modules.core.exceptions import ConflictError, DomainError, NotFoundError


class ProductNotFound(NotFoundError):
    default_detail = "Product not found."


class CategoryNotFound(NotFoundError):
    default_detail = "Category not found."


class StockNotFound(NotFoundError):
    default_detail = "Stock record not found."


class InactiveProduct(DomainError):
    default_detail = "Product is not available."
    code = "inactive_product"


class InvalidQuantity(DomainError):
    default_detail = "Invalid quantity."
    code = "invalid_quantity"


class DuplicateSku(ConflictError):
    default_detail = "A product with this SKU already exists."
    code = "duplicate_sku"


class InsufficientStock(ConflictError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient stock."
    code = "insufficient_stock"
