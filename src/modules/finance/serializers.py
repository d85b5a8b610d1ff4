from __future__ import annotations

from rest_framework import serializers

from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction


class FinanceAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = FinanceAccount
        fields = [
            "id",
            "name",
            "name_ar",
            "type",
            "balance",
            "currency",
            "bank_name",
            "account_number",
            "is_active",
            "last_reconciled_at",
            "created_at",
            "updated_at",
        ]
        # Balances only move through transactions.
        read_only_fields = ["id", "balance", "last_reconciled_at", "created_at", "updated_at"]


class FinanceTransactionSerializer(serializers.ModelSerializer):
    account_id = serializers.UUIDField(read_only=True, allow_null=True)
    account_name = serializers.CharField(source="account.name", read_only=True, default=None)
    created_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = FinanceTransaction
        fields = [
            "id",
            "type",
            "status",
            "amount",
            "currency",
            "description",
            "category",
            "reference_type",
            "reference_id",
            "account_id",
            "account_name",
            "created_by_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class FinanceExpenseSerializer(serializers.ModelSerializer):
    account_id = serializers.UUIDField(read_only=True, allow_null=True)
    approved_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = FinanceExpense
        fields = [
            "id",
            "expense_number",
            "category",
            "description",
            "vendor",
            "gross_amount",
            "vat_amount",
            "amount",
            "currency",
            "invoice_number",
            "invoice_date",
            "due_date",
            "payment_terms",
            "status",
            "approved_by_id",
            "approved_at",
            "paid_at",
            "account_id",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "expense_number",
            "amount",
            "currency",
            "status",
            "approved_by_id",
            "approved_at",
            "paid_at",
            "account_id",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"vat_amount": {"required": False}}
