from rest_framework import serializers

from modules.core.models import ShopSettings


class ShopSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShopSettings
        fields = [
            "vat_rate",
            "delivery_fee",
            "free_delivery_threshold",
            "express_delivery_fee",
            "minimum_order_amount",
            "welcome_bonus",
            "cashback_percentage",
            "loyalty_points_per_aed",
            "loyalty_point_value",
            "referral_bonus_points",
            "tax_registration_number",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]
        extra_kwargs = {
            "vat_rate": {"min_value": 0, "max_value": 1},
            "cashback_percentage": {"min_value": 0, "max_value": 100},
        }
