"""Order read serializers.

Input is parsed into pydantic DTOs (``dtos.py``); these only shape
responses.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.serializers import UserSummarySerializer
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.pricing import line_total


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "sku",
            "unit",
            "quantity",
            "unit_price",
            "total_price",
            "notes",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.UUIDField(source="changed_by_id", read_only=True)

    class Meta:
        model = OrderStatusHistory
        fields = ["id", "old_status", "new_status", "changed_by", "notes", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order with items, history and the pricing breakdown."""

    customer = UserSummarySerializer(read_only=True)
    delivery_zone_id = serializers.UUIDField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "status",
            "payment_status",
            "payment_method",
            "subtotal",
            "discount",
            "discount_code",
            "delivery_fee",
            "driver_tip",
            "vat_rate",
            "vat_amount",
            "total",
            "delivery_address",
            "delivery_zone_id",
            "is_express",
            "estimated_delivery_at",
            "actual_delivery_at",
            "invoice_number",
            "notes",
            "items",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "payment_status",
            "payment_method",
            "total",
            "is_express",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj: Order) -> int:
        return len(obj.items.all())


class QuoteItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(source="product.id")
    product_name = serializers.CharField()
    sku = serializers.CharField()
    unit = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_price = serializers.SerializerMethodField()

    def get_total_price(self, obj: dict) -> str:
        return str(line_total(obj["quantity"], obj["unit_price"]))
