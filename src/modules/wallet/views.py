"""Wallet API views: the caller's own wallet, plus a staff credit endpoint."""

from __future__ import annotations

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.exceptions import UserNotFound
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.wallet.dtos import CreditDTO, DeductDTO, TopUpDTO
from modules.wallet.exceptions import InsufficientBalance
from modules.wallet.factories import build_wallet_service
from modules.wallet.serializers import WalletSerializer, WalletTransactionSerializer


class WalletView(APIView):
    """GET /api/wallet"""

    def get(self, request: Request) -> Response:
        wallet, transactions = build_wallet_service().get_wallet(str(request.user.id))
        return Response(
            {
                **WalletSerializer(wallet).data,
                "transactions": WalletTransactionSerializer(transactions, many=True).data,
            }
        )


class TopUpView(APIView):
    """POST /api/wallet/topup"""

    def post(self, request: Request) -> Response:
        dto = parse_dto(TopUpDTO, request.data)
        wallet = build_wallet_service().top_up(str(request.user.id), dto)
        return Response(
            {"message": "Wallet topped up successfully", "balance": wallet.balance}
        )


class DeductView(APIView):
    """POST /api/wallet/deduct"""

    def post(self, request: Request) -> Response:
        dto = parse_dto(DeductDTO, request.data)
        try:
            wallet = build_wallet_service().deduct(str(request.user.id), dto)
        except InsufficientBalance as exc:
            return domain_error_response(exc)
        return Response({"balance": wallet.balance})


class CreditView(APIView):
    """POST /api/wallet/credit"""

    permission_classes = [IsStaff]

    def post(self, request: Request) -> Response:
        dto = parse_dto(CreditDTO, request.data)
        try:
            wallet = build_wallet_service().credit(dto)
        except UserNotFound as exc:
            return domain_error_response(exc)
        return Response({"user_id": str(dto.user_id), "balance": wallet.balance})
