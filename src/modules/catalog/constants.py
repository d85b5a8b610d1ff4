"""Catalog constants: selling units and stock movement kinds."""

from decimal import Decimal

from django.db import models


class ProductUnit(models.TextChoices):
    KG = "kg", "Kilogram"
    PIECE = "piece", "Piece"
    GRAM = "gram", "Gram"


class MovementType(models.TextChoices):
    IN = "in", "Stock in"
    OUT = "out", "Stock out"
    ADJUSTMENT = "adjustment", "Adjustment"
    RESERVED = "reserved", "Reserved"
    RELEASED = "released", "Released"


class ReferenceType(models.TextChoices):
    ORDER = "order", "Order"
    RETURN = "return", "Return"
    WASTE = "waste", "Waste"
    TRANSFER = "transfer", "Transfer"
    PURCHASE = "purchase", "Purchase order"
    MANUAL = "manual", "Manual"


DEFAULT_MIN_ORDER_QUANTITY = Decimal("0.250")
DEFAULT_MAX_ORDER_QUANTITY = Decimal("10.000")
QUANTITY_PLACES = Decimal("0.001")
