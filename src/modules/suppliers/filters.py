import django_filters
from django.db.models import Q

from modules.suppliers.constants import (
    PurchaseOrderStatus,
    PurchasePaymentStatus,
    SupplierPaymentTerms,
    SupplierStatus,
)
from modules.suppliers.models import PurchaseOrder, Supplier


class SupplierFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=SupplierStatus.choices)
    payment_terms = django_filters.ChoiceFilter(choices=SupplierPaymentTerms.choices)
    category = django_filters.CharFilter(method="filter_category")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Supplier
        fields = ["status", "payment_terms"]

    def filter_category(self, queryset, name, value):
        # matches the quoted element inside the stored JSON list
        return queryset.filter(categories__icontains=f'"{value}"')

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(name_ar__icontains=value)
            | Q(code__icontains=value)
            | Q(email__icontains=value)
        )


class PurchaseOrderFilter(django_filters.FilterSet):
    supplier = django_filters.UUIDFilter(field_name="supplier_id")
    status = django_filters.ChoiceFilter(choices=PurchaseOrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=PurchasePaymentStatus.choices)
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = PurchaseOrder
        fields = ["supplier", "status", "payment_status"]
