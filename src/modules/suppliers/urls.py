from rest_framework.routers import DefaultRouter

from modules.suppliers.views import (
    PurchaseOrderViewSet,
    SupplierProductViewSet,
    SupplierViewSet,
)

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("suppliers/products", SupplierProductViewSet, basename="supplier-product")
router.register("suppliers", SupplierViewSet, basename="supplier")
router.register("purchase-orders", PurchaseOrderViewSet, basename="purchase-order")

urlpatterns = router.urls
