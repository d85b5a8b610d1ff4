from __future__ import annotations

from rest_framework import serializers

from modules.loyalty.models import LoyaltyTier, LoyaltyTransaction


class LoyaltyTierSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyTier
        fields = ["id", "name", "name_ar", "min_points", "multiplier", "benefits", "icon", "sort_order"]
        read_only_fields = fields


class LoyaltyTransactionSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = LoyaltyTransaction
        fields = ["id", "type", "points", "description", "order_id", "created_at"]
        read_only_fields = fields


class LoyaltySummarySerializer(serializers.Serializer):
    points = serializers.IntegerField(source="account.points")
    total_earned = serializers.IntegerField(source="account.total_earned")
    referral_code = serializers.CharField(source="account.referral_code")
    current_tier = LoyaltyTierSerializer()
    next_tier = LoyaltyTierSerializer(allow_null=True)
    points_to_next_tier = serializers.IntegerField()
    transactions = LoyaltyTransactionSerializer(many=True)
