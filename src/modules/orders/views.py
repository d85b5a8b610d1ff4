"""Order API views.

Customers place and read their own orders; the back office moves them
through the workflow.  Domain exceptions are caught explicitly and
returned through ``domain_error_response``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import AddressNotFound
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsAdmin, IsStaff
from modules.core.validators import UUID_PATTERN
from modules.orders.dtos import (
    CancelOrderDTO,
    CreateOrderDTO,
    UpdateOrderStatusDTO,
    UpdatePaymentStatusDTO,
)
from modules.orders.exceptions import (
    BelowMinimumOrder,
    ExpressNotAvailable,
    InactiveProduct,
    InsufficientStock,
    InvalidOrderStatus,
    InvalidPaymentStatus,
    InvalidPromoCode,
    InvalidQuantity,
    OrderAccessDenied,
    OrderNotFound,
    ProductNotFound,
    StaleOrderStatus,
)
from modules.orders.factories import build_order_service
from modules.orders.filters import OrderFilter
from modules.orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    QuoteItemSerializer,
)
from modules.orders.services import DraftOrder

PRICING_ERRORS = (
    ProductNotFound,
    InactiveProduct,
    InvalidQuantity,
    InvalidPromoCode,
    ExpressNotAvailable,
    AddressNotFound,
)
CHECKOUT_ERRORS = PRICING_ERRORS + (BelowMinimumOrder, InsufficientStock, OrderAccessDenied)
TRANSITION_ERRORS = (OrderNotFound, InvalidOrderStatus, StaleOrderStatus, InsufficientStock)


def _quote_payload(draft: DraftOrder) -> dict:
    totals = draft.totals
    zone = draft.zone
    return {
        "items": QuoteItemSerializer(draft.items, many=True).data,
        **{key: str(value) for key, value in totals.as_dict().items()},
        "zone": {"id": str(zone.id), "name": zone.name} if zone else None,
        "is_express": draft.is_express,
        "discount_code": draft.discount_code.code if draft.discount_code else None,
        "minimum_order": str(draft.minimum_order),
        "meets_minimum": totals.subtotal - totals.discount >= draft.minimum_order,
        "estimated_delivery_at": draft.estimated_delivery_at.isoformat(),
        "warnings": draft.warnings,
    }


class OrderViewSet(GenericViewSet):
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at"]
    lookup_value_regex = UUID_PATTERN
    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAdmin()]
        if self.action in {"update_status", "advance", "payment_status", "stats"}:
            return [IsStaff()]
        return super().get_permissions()

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "by_number"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return self._service.list_orders_for(self.request.user)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"])
    def quote(self, request: Request) -> Response:
        dto = parse_dto(CreateOrderDTO, request.data)
        try:
            draft = self._service.quote(request.user, dto)
        except PRICING_ERRORS as exc:
            return domain_error_response(exc)
        return Response(_quote_payload(draft))

    def create(self, request: Request) -> Response:
        """Place an order.

        A repeated ``Idempotency-Key`` returns the original order with 200.
        """
        data = dict(request.data)
        idempotency_key = request.headers.get("Idempotency-Key")
        if idempotency_key:
            data["idempotency_key"] = idempotency_key
        dto = parse_dto(CreateOrderDTO, data)
        try:
            order, created = self._service.create_order(request.user, dto)
        except CHECKOUT_ERRORS as exc:
            return domain_error_response(exc)
        return Response(
            OrderSerializer(order).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            order = self._service.get_order_for(request.user, pk)
        except (OrderNotFound, OrderAccessDenied) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path=r"number/(?P<order_number>[A-Za-z0-9-]+)")
    def by_number(self, request: Request, order_number: str | None = None) -> Response:
        try:
            order = self._service.get_by_number_for(request.user, order_number)
        except (OrderNotFound, OrderAccessDenied) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        return Response(self._service.stats())

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdateOrderStatusDTO, request.data)
        try:
            order = self._service.update_status(pk, dto, changed_by=request.user)
        except TRANSITION_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def advance(self, request: Request, pk: str | None = None) -> Response:
        expected_status = request.data.get("expected_status") if request.data else None
        try:
            order = self._service.advance(
                pk, changed_by=request.user, expected_status=expected_status
            )
        except TRANSITION_ERRORS as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(CancelOrderDTO, request.data)
        try:
            order = self._service.cancel_order(pk, request.user, dto)
        except TRANSITION_ERRORS + (OrderAccessDenied,) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"], url_path="payment-status")
    def payment_status(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdatePaymentStatusDTO, request.data)
        try:
            order = self._service.update_payment_status(pk, dto, changed_by=request.user)
        except (OrderNotFound, InvalidPaymentStatus) as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_order(pk, changed_by=request.user)
        except OrderNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
