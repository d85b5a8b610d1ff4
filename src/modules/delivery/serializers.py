from __future__ import annotations

from rest_framework import serializers

from modules.accounts.serializers import UserSummarySerializer
from modules.delivery.models import DeliveryTracking, DeliveryZone


class DeliveryZoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryZone
        fields = [
            "id",
            "name",
            "name_ar",
            "emirate",
            "areas",
            "delivery_fee",
            "minimum_order",
            "estimated_minutes",
            "express_enabled",
            "express_fee",
            "express_hours",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class DeliveryTrackingSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    order_status = serializers.CharField(source="order.status", read_only=True)
    delivery_address = serializers.JSONField(source="order.delivery_address", read_only=True)
    driver = UserSummarySerializer(read_only=True)

    class Meta:
        model = DeliveryTracking
        fields = [
            "id",
            "order_id",
            "order_number",
            "order_status",
            "delivery_address",
            "driver",
            "status",
            "current_location",
            "timeline",
            "estimated_arrival",
            "delivered_at",
            "delivery_proof",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
