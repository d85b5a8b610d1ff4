import django_filters

from modules.delivery.constants import TrackingStatus
from modules.delivery.models import DeliveryTracking


class TrackingFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=TrackingStatus.choices)
    driver = django_filters.UUIDFilter(field_name="driver_id")

    class Meta:
        model = DeliveryTracking
        fields = ["status", "driver"]
