from rest_framework import serializers

from modules.promotions.models import DiscountCode


class DiscountCodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = DiscountCode
        fields = [
            "id",
            "code",
            "description",
            "type",
            "value",
            "minimum_order",
            "maximum_discount",
            "usage_limit",
            "usage_count",
            "user_limit",
            "valid_from",
            "valid_to",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "usage_count", "created_at", "updated_at"]
        extra_kwargs = {"code": {"validators": []}}
