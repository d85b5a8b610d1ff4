"""Loyalty API views."""

from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.exceptions import UserNotFound
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.loyalty.dtos import EarnPointsDTO, RedeemPointsDTO, ReferralDTO
from modules.loyalty.exceptions import (
    InsufficientPoints,
    InvalidReferralCode,
    OwnReferralCode,
    ReferralAlreadyUsed,
)
from modules.loyalty.factories import build_loyalty_service
from modules.loyalty.serializers import LoyaltySummarySerializer, LoyaltyTierSerializer

REFERRAL_ERRORS = (InvalidReferralCode, OwnReferralCode, ReferralAlreadyUsed)


class LoyaltyView(APIView):
    """GET /api/loyalty"""

    def get(self, request: Request) -> Response:
        summary = build_loyalty_service().summary(str(request.user.id))
        return Response(LoyaltySummarySerializer(summary).data)


class EarnPointsView(APIView):
    """POST /api/loyalty/earn"""

    permission_classes = [IsStaff]

    def post(self, request: Request) -> Response:
        dto = parse_dto(EarnPointsDTO, request.data)
        try:
            account = build_loyalty_service().earn(dto)
        except UserNotFound as exc:
            return domain_error_response(exc)
        return Response(
            {
                "message": f"Added {dto.points} points",
                "points": account.points,
                "total_earned": account.total_earned,
            }
        )


class RedeemPointsView(APIView):
    """POST /api/loyalty/redeem"""

    def post(self, request: Request) -> Response:
        dto = parse_dto(RedeemPointsDTO, request.data)
        try:
            account, value = build_loyalty_service().redeem(str(request.user.id), dto)
        except InsufficientPoints as exc:
            return domain_error_response(exc)
        return Response(
            {
                "message": f"Redeemed {dto.points} points",
                "points": account.points,
                "value": value,
            }
        )


class ReferralView(APIView):
    """POST /api/loyalty/referral"""

    def post(self, request: Request) -> Response:
        dto = parse_dto(ReferralDTO, request.data)
        try:
            account, bonus = build_loyalty_service().apply_referral(
                str(request.user.id), dto.code
            )
        except REFERRAL_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            {
                "message": f"Successfully applied referral code! You earned {bonus} points",
                "points": account.points,
            }
        )


class LoyaltyTiersView(APIView):
    """GET /api/loyalty/tiers"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        return Response(LoyaltyTierSerializer(build_loyalty_service().tiers(), many=True).data)
