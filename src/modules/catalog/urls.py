from rest_framework.routers import DefaultRouter

from modules.catalog.views import CategoryViewSet, ProductViewSet, StockViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("products", ProductViewSet, basename="product")
router.register("categories", CategoryViewSet, basename="category")
router.register("stock", StockViewSet, basename="stock")

urlpatterns = router.urls
