from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.finance.views import (
    BalanceSheetView,
    CashFlowView,
    ExpenseViewSet,
    FinanceAccountViewSet,
    FinanceTransactionViewSet,
    ProfitLossView,
    SummaryView,
    VATReportView,
)

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register("finance/accounts", FinanceAccountViewSet, basename="finance-account")
router.register("finance/transactions", FinanceTransactionViewSet, basename="finance-transaction")
router.register("finance/expenses", ExpenseViewSet, basename="finance-expense")

urlpatterns = [
    path("finance/summary", SummaryView.as_view(), name="finance-summary"),
    path("finance/reports/profit-loss", ProfitLossView.as_view(), name="finance-profit-loss"),
    path("finance/reports/cash-flow", CashFlowView.as_view(), name="finance-cash-flow"),
    path("finance/reports/vat", VATReportView.as_view(), name="finance-vat"),
    path(
        "finance/reports/balance-sheet", BalanceSheetView.as_view(), name="finance-balance-sheet"
    ),
    *router.urls,
]
