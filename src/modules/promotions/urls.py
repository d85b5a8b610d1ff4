from rest_framework.routers import DefaultRouter

from modules.promotions.views import DiscountCodeViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("promotions", DiscountCodeViewSet, basename="promotion")

urlpatterns = router.urls
