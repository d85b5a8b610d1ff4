from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Category, Product, Stock, StockMovement


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "name_ar",
            "slug",
            "description",
            "sort_order",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"slug": {"required": False, "validators": []}}


class ProductSerializer(serializers.ModelSerializer):
    category = CategorySerializer(read_only=True)
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    available_quantity = serializers.SerializerMethodField()
    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "name_ar",
            "description",
            "category",
            "price",
            "discount",
            "effective_price",
            "unit",
            "min_order_quantity",
            "max_order_quantity",
            "is_active",
            "is_featured",
            "tags",
            "available_quantity",
            "in_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _stock(self, obj: Product):
        return getattr(obj, "stock", None)

    def get_available_quantity(self, obj: Product) -> str:
        stock = self._stock(obj)
        return str(stock.available_quantity) if stock else "0.000"

    def get_in_stock(self, obj: Product) -> bool:
        stock = self._stock(obj)
        return bool(stock and stock.available_quantity > 0)


class AdminProductSerializer(ProductSerializer):
    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ["cost_price"]
        read_only_fields = fields


class StockSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    unit = serializers.CharField(source="product.unit", read_only=True)
    available_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, read_only=True
    )
    is_low = serializers.BooleanField(read_only=True)

    class Meta:
        model = Stock
        fields = [
            "id",
            "product_id",
            "product_name",
            "sku",
            "unit",
            "quantity",
            "reserved_quantity",
            "available_quantity",
            "low_stock_threshold",
            "reorder_point",
            "reorder_quantity",
            "is_low",
            "last_restocked_at",
            "batch_number",
            "updated_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    performed_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product_id",
            "product_name",
            "type",
            "quantity",
            "previous_quantity",
            "new_quantity",
            "reason",
            "reference_type",
            "reference_id",
            "performed_by_id",
            "created_at",
        ]
        read_only_fields = fields
