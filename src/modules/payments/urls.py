from rest_framework.routers import DefaultRouter

from modules.payments.views import PaymentViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("payments", PaymentViewSet, basename="payment")

urlpatterns = router.urls
