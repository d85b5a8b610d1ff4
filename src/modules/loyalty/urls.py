from django.urls import path

from modules.loyalty.views import (
    EarnPointsView,
    LoyaltyTiersView,
    LoyaltyView,
    RedeemPointsView,
    ReferralView,
)

urlpatterns = [
    path("loyalty", LoyaltyView.as_view(), name="loyalty"),
    path("loyalty/earn", EarnPointsView.as_view(), name="loyalty-earn"),
    path("loyalty/redeem", RedeemPointsView.as_view(), name="loyalty-redeem"),
    path("loyalty/referral", ReferralView.as_view(), name="loyalty-referral"),
    path("loyalty/tiers", LoyaltyTiersView.as_view(), name="loyalty-tiers"),
]
