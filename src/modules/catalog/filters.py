import django_filters
from django.db.models import Q

from modules.catalog.models import Product, StockMovement


class ProductFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(method="filter_category")
    active = django_filters.BooleanFilter(field_name="is_active")
    featured = django_filters.BooleanFilter(field_name="is_featured")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Product
        fields = ["category", "active", "featured", "min_price", "max_price", "search"]

    def filter_category(self, queryset, name, value):
        """Accept either the category id or its slug."""
        if len(value) == 36 and value.count("-") == 4:
            return queryset.filter(category_id=value)
        return queryset.filter(category__slug=value)

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(name_ar__icontains=value)
            | Q(sku__icontains=value)
            | Q(description__icontains=value)
        )


class StockMovementFilter(django_filters.FilterSet):
    product = django_filters.UUIDFilter(field_name="product_id")
    type = django_filters.CharFilter(field_name="type")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = StockMovement
        fields = ["product", "type", "date_from", "date_to"]
