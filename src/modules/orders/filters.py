import django_filters

from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    payment_method = django_filters.ChoiceFilter(choices=PaymentMethod.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total", lookup_expr="lte")
    search = django_filters.CharFilter(field_name="order_number", lookup_expr="icontains")

    class Meta:
        model = Order
        fields = ["status", "payment_status", "payment_method", "is_express"]
