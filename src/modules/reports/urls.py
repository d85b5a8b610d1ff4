from django.urls import path

from modules.reports.views import (
    CustomersView,
    InventoryView,
    OrdersView,
    SalesByCategoryView,
    SalesByProductView,
    SalesTimeseriesView,
    SalesView,
)

urlpatterns = [
    path("reports/sales", SalesView.as_view(), name="reports-sales"),
    path("reports/sales-by-category", SalesByCategoryView.as_view(), name="reports-by-category"),
    path("reports/sales-by-product", SalesByProductView.as_view(), name="reports-by-product"),
    path("reports/sales-timeseries", SalesTimeseriesView.as_view(), name="reports-timeseries"),
    path("reports/customers", CustomersView.as_view(), name="reports-customers"),
    path("reports/inventory", InventoryView.as_view(), name="reports-inventory"),
    path("reports/orders", OrdersView.as_view(), name="reports-orders"),
]
