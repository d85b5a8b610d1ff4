from __future__ import annotations

from rest_framework import serializers

from modules.wallet.models import Wallet, WalletTransaction


class WalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = [
            "id",
            "type",
            "amount",
            "balance_after",
            "description",
            "description_ar",
            "reference",
            "created_at",
        ]
        read_only_fields = fields


class WalletSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Wallet
        fields = ["id", "user_id", "balance", "currency", "updated_at"]
        read_only_fields = fields
