import django_filters
from django.db.models import Q

from modules.finance.constants import (
    EXPENSE_CATEGORY_CHOICES,
    AccountType,
    ExpenseStatus,
    TransactionStatus,
    TransactionType,
)
from modules.finance.models import FinanceAccount, FinanceExpense, FinanceTransaction


class AccountFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=AccountType.choices)
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = FinanceAccount
        fields = ["type", "is_active"]


class TransactionFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=TransactionType.choices)
    status = django_filters.ChoiceFilter(choices=TransactionStatus.choices)
    account = django_filters.UUIDFilter(field_name="account_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = FinanceTransaction
        fields = ["type", "status", "account"]


class ExpenseFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(choices=EXPENSE_CATEGORY_CHOICES)
    status = django_filters.ChoiceFilter(choices=ExpenseStatus.choices)
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = FinanceExpense
        fields = ["category", "status"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(description__icontains=value)
            | Q(vendor__icontains=value)
            | Q(expense_number__icontains=value)
        )
