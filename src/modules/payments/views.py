"""Payment API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.core.validators import UUID_PATTERN
from modules.orders.exceptions import OrderAccessDenied, OrderNotFound
from modules.payments.dtos import ProcessPaymentDTO, RefundDTO
from modules.payments.exceptions import (
    InvalidPaymentState,
    PaymentAlreadyCaptured,
    PaymentDeclined,
    PaymentNotFound,
    RefundExceedsBalance,
    RefundFailed,
)
from modules.payments.factories import build_payment_service
from modules.payments.filters import PaymentFilter
from modules.payments.serializers import PaymentSerializer


class PaymentViewSet(GenericViewSet):
    serializer_class = PaymentSerializer
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_payment_service()

    def get_permissions(self):
        if self.action in {"process", "by_order"}:
            return [IsAuthenticated()]
        return [IsStaff()]

    def get_queryset(self):
        return self._service.list_payments()

    def list(self, request: Request) -> Response:
        queryset = PaymentFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(PaymentSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            payment = self._service.get_payment(pk)
        except PaymentNotFound as exc:
            return domain_error_response(exc)
        return Response(PaymentSerializer(payment).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=rf"order/(?P<order_id>{UUID_PATTERN})",
    )
    def by_order(self, request: Request, order_id: str | None = None) -> Response:
        try:
            payment = self._service.get_for_order(request.user, order_id)
        except (OrderNotFound, OrderAccessDenied, PaymentNotFound) as exc:
            return domain_error_response(exc)
        return Response(PaymentSerializer(payment).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        return Response(self._service.stats())

    @action(detail=False, methods=["post"])
    def process(self, request: Request) -> Response:
        dto = parse_dto(ProcessPaymentDTO, request.data)
        try:
            result = self._service.process(request.user, dto)
        except (
            OrderNotFound,
            OrderAccessDenied,
            PaymentAlreadyCaptured,
            InvalidPaymentState,
        ) as exc:
            return domain_error_response(exc)
        if result.declined:
            return domain_error_response(PaymentDeclined(result.error))
        return Response(
            {"message": result.message, "payment": PaymentSerializer(result.payment).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def capture(self, request: Request, pk: str | None = None) -> Response:
        try:
            payment = self._service.capture(pk, user=request.user)
        except (PaymentNotFound, InvalidPaymentState) as exc:
            return domain_error_response(exc)
        return Response(
            {"message": "Payment captured successfully", "payment": PaymentSerializer(payment).data}
        )

    @action(detail=True, methods=["post"])
    def refund(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(RefundDTO, request.data)
        try:
            payment = self._service.refund(pk, dto, user=request.user)
        except (PaymentNotFound, InvalidPaymentState, RefundExceedsBalance, RefundFailed) as exc:
            return domain_error_response(exc)
        return Response(
            {
                "message": f"Refund of AED {dto.amount:.2f} processed successfully",
                "payment": PaymentSerializer(payment).data,
            }
        )
