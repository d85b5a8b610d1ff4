from django.urls import path

from modules.wallet.views import CreditView, DeductView, TopUpView, WalletView

urlpatterns = [
    path("wallet", WalletView.as_view(), name="wallet"),
    path("wallet/topup", TopUpView.as_view(), name="wallet-topup"),
    path("wallet/deduct", DeductView.as_view(), name="wallet-deduct"),
    path("wallet/credit", CreditView.as_view(), name="wallet-credit"),
]
