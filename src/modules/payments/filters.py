import django_filters

from modules.orders.constants import PaymentMethod, PaymentStatus
from modules.payments.models import Payment


class PaymentFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    method = django_filters.ChoiceFilter(choices=PaymentMethod.choices)
    order = django_filters.UUIDFilter(field_name="order_id")
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Payment
        fields = ["status", "method"]
