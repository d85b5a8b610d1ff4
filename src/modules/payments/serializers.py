from __future__ import annotations

from rest_framework import serializers

from modules.payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    customer_id = serializers.UUIDField(read_only=True)
    refundable_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order_id",
            "order_number",
            "customer_id",
            "amount",
            "currency",
            "method",
            "status",
            "gateway_transaction_id",
            "card_brand",
            "card_last4",
            "refunded_amount",
            "refundable_amount",
            "refunds",
            "captured_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
