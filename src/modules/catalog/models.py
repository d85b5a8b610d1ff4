"""Category, Product, Stock and StockMovement models.

- SKUs are stored upper-cased and are unique.
- ``price`` must be positive; ``discount`` is a percentage in 0..100.
- Every product owns exactly one ``Stock`` row, created with the product.
- ``available_quantity = quantity - reserved_quantity`` never goes negative.
- ``StockMovement`` is an append-only ledger of every stock change.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.catalog.constants import (
    DEFAULT_MAX_ORDER_QUANTITY,
    DEFAULT_MIN_ORDER_QUANTITY,
    MovementType,
    ProductUnit,
    ReferenceType,
)
from modules.core.models import BaseModel, SoftDeleteModel
from modules.core.money import round2


class Category(BaseModel):
    name = models.CharField(max_length=100)
    name_ar = models.CharField(max_length=100, blank=True, default="")
    slug = models.SlugField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "categories"
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Product(SoftDeleteModel):
    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    name_ar = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="products", null=True, blank=True
    )
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))]
    )
    cost_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, default=None
    )
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    unit = models.CharField(max_length=10, choices=ProductUnit.choices, default=ProductUnit.KG)
    min_order_quantity = models.DecimalField(
        max_digits=8, decimal_places=3, default=DEFAULT_MIN_ORDER_QUANTITY
    )
    max_order_quantity = models.DecimalField(
        max_digits=8, decimal_places=3, default=DEFAULT_MAX_ORDER_QUANTITY
    )
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"], name="products_active_idx"),
            models.Index(fields=["is_featured"], name="products_featured_idx"),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(price__gt=0), name="products_price_positive"),
            models.CheckConstraint(
                check=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                name="products_discount_range",
            ),
        ]

    @property
    def effective_price(self) -> Decimal:
        return effective_price(self)

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"


def effective_price(product: Product) -> Decimal:
    """Price after the product's own percentage discount."""
    discount = product.discount or Decimal("0")
    return round2(product.price * (1 - discount / Decimal("100")))


class Stock(BaseModel):
    product = models.OneToOneField(Product, on_delete=models.CASCADE, related_name="stock")
    quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    reserved_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    low_stock_threshold = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("5")
    )
    reorder_point = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("10"))
    reorder_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("20"))
    last_restocked_at = models.DateTimeField(null=True, blank=True)
    batch_number = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "stock"
        ordering = ["product__name"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(reserved_quantity__gte=0), name="stock_reserved_non_negative"
            ),
            models.CheckConstraint(
                check=models.Q(quantity__gte=models.F("reserved_quantity")),
                name="stock_available_non_negative",
            ),
        ]

    @property
    def available_quantity(self) -> Decimal:
        return self.quantity - self.reserved_quantity

    @property
    def is_low(self) -> bool:
        return self.available_quantity <= self.low_stock_threshold

    def __str__(self) -> str:
        return f"Stock({self.product_id}: {self.quantity}/{self.reserved_quantity})"


class StockMovement(BaseModel):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="movements")
    type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    previous_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    new_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reason = models.CharField(max_length=255, blank=True, default="")
    reference_type = models.CharField(
        max_length=20, choices=ReferenceType.choices, default=ReferenceType.MANUAL
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")
    performed_by = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    class Meta:
        db_table = "stock_movements"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["product", "-created_at"], name="stock_movements_product_idx"),
            models.Index(fields=["type"], name="stock_movements_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.quantity} of {self.product_id}"
