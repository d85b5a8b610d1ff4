from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.delivery.views import (
    AssignDriverView,
    CheckAvailabilityView,
    DeliveryZoneViewSet,
    DriverListView,
    TrackingViewSet,
)

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("delivery/zones", DeliveryZoneViewSet, basename="delivery-zone")
router.register("delivery/tracking", TrackingViewSet, basename="delivery-tracking")

urlpatterns = [
    path(
        "delivery/check-availability",
        CheckAvailabilityView.as_view(),
        name="delivery-check-availability",
    ),
    path("delivery/assign", AssignDriverView.as_view(), name="delivery-assign"),
    path("delivery/drivers", DriverListView.as_view(), name="delivery-drivers"),
    *router.urls,
]
