import django_filters
from django.db.models import Q

from modules.accounts.models import User


class UserFilter(django_filters.FilterSet):
    role = django_filters.CharFilter(field_name="role")
    is_active = django_filters.BooleanFilter(field_name="is_active")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = User
        fields = ["role", "is_active", "search"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(username__icontains=value)
            | Q(email__icontains=value)
            | Q(first_name__icontains=value)
            | Q(family_name__icontains=value)
            | Q(mobile__icontains=value)
        )
