"""Supplier and purchase order read serializers; input goes through ``dtos.py``."""

from __future__ import annotations

from rest_framework import serializers

from modules.suppliers.models import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierProduct,
)


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id",
            "code",
            "name",
            "name_ar",
            "email",
            "phone",
            "website",
            "tax_number",
            "address",
            "contacts",
            "payment_terms",
            "currency",
            "credit_limit",
            "current_balance",
            "categories",
            "total_orders",
            "total_spent",
            "status",
            "notes",
            "last_order_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SupplierProductSerializer(serializers.ModelSerializer):
    supplier_id = serializers.UUIDField(read_only=True)
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = SupplierProduct
        fields = [
            "id",
            "supplier_id",
            "product_id",
            "product_name",
            "product_sku",
            "supplier_sku",
            "unit_cost",
            "minimum_order_quantity",
            "lead_time_days",
            "is_preferred",
            "last_purchase_price",
            "last_purchase_date",
            "notes",
        ]
        read_only_fields = fields


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    remaining_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, read_only=True
    )

    class Meta:
        model = PurchaseOrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "supplier_sku",
            "quantity",
            "unit_cost",
            "total_cost",
            "received_quantity",
            "remaining_quantity",
            "notes",
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_id = serializers.UUIDField(read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    outstanding = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    created_by_id = serializers.UUIDField(read_only=True, allow_null=True)
    approved_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "order_number",
            "supplier_id",
            "supplier_name",
            "items",
            "subtotal",
            "tax_rate",
            "tax_amount",
            "shipping_cost",
            "discount",
            "total",
            "received_amount",
            "paid_amount",
            "outstanding",
            "status",
            "payment_status",
            "expected_delivery_date",
            "actual_delivery_date",
            "delivery_address",
            "delivery_notes",
            "created_by_id",
            "approved_by_id",
            "approved_at",
            "internal_notes",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
