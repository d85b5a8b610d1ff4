"""Delivery API views.

Zones and the availability check are public; assignment and the driver
list are back-office; tracking is shared between the customer, the
assigned driver and staff.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.accounts.serializers import DriverSerializer
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff, is_staff_user
from modules.core.validators import UUID_PATTERN
from modules.delivery.dtos import (
    AssignDriverDTO,
    CheckAvailabilityDTO,
    DeliveryProofDTO,
    DeliveryZoneDTO,
    LocationDTO,
    TrackingStatusDTO,
)
from modules.delivery.exceptions import (
    DeliveryZoneNotFound,
    InvalidDriver,
    InvalidTrackingStatus,
    OrderNotReadyForDelivery,
    TrackingAccessDenied,
    TrackingNotFound,
)
from modules.delivery.factories import build_delivery_service, build_zone_service
from modules.delivery.filters import TrackingFilter
from modules.delivery.serializers import DeliveryTrackingSerializer, DeliveryZoneSerializer
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound

TRACKING_UPDATE_ERRORS = (
    TrackingNotFound,
    TrackingAccessDenied,
    InvalidTrackingStatus,
    InvalidOrderStatus,
    OrderNotFound,
)


class DeliveryZoneViewSet(GenericViewSet):
    serializer_class = DeliveryZoneSerializer
    lookup_value_regex = UUID_PATTERN
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_zone_service()

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        return [IsStaff()]

    def get_queryset(self):
        return self._service.list_zones(include_inactive=is_staff_user(self.request.user))

    def list(self, request: Request) -> Response:
        return Response(DeliveryZoneSerializer(self.get_queryset(), many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            zone = self._service.get_zone(pk)
        except DeliveryZoneNotFound as exc:
            return domain_error_response(exc)
        return Response(DeliveryZoneSerializer(zone).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(DeliveryZoneDTO, request.data)
        zone = self._service.create_zone(dto)
        return Response(DeliveryZoneSerializer(zone).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = DeliveryZoneSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            zone = self._service.update_zone(pk, serializer.validated_data)
        except DeliveryZoneNotFound as exc:
            return domain_error_response(exc)
        return Response(DeliveryZoneSerializer(zone).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """Zones are deactivated, never deleted; orders keep pointing at them."""
        try:
            self._service.deactivate_zone(pk)
        except DeliveryZoneNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CheckAvailabilityView(APIView):
    """POST /api/delivery/check-availability"""

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        dto = parse_dto(CheckAvailabilityDTO, request.data)
        return Response(build_zone_service().check_availability(dto))


class AssignDriverView(APIView):
    """POST /api/delivery/assign"""

    permission_classes = [IsStaff]

    def post(self, request: Request) -> Response:
        dto = parse_dto(AssignDriverDTO, request.data)
        try:
            tracking = build_delivery_service().assign(dto, assigned_by=request.user)
        except (InvalidDriver, OrderNotFound, OrderNotReadyForDelivery, InvalidOrderStatus) as exc:
            return domain_error_response(exc)
        return Response(DeliveryTrackingSerializer(tracking).data, status=status.HTTP_201_CREATED)


class DriverListView(APIView):
    """GET /api/delivery/drivers"""

    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        drivers = build_delivery_service().drivers()
        return Response(DriverSerializer(drivers, many=True).data)


class TrackingViewSet(GenericViewSet):
    """Tracking records addressed by order id."""

    serializer_class = DeliveryTrackingSerializer
    lookup_field = "order_id"
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_delivery_service()

    def get_queryset(self):
        return self._service.list_tracking_for(self.request.user)

    def list(self, request: Request) -> Response:
        queryset = TrackingFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(DeliveryTrackingSerializer(page, many=True).data)

    def retrieve(self, request: Request, order_id: str | None = None) -> Response:
        try:
            tracking = self._service.get_tracking_for(request.user, order_id)
        except (TrackingNotFound, TrackingAccessDenied) as exc:
            return domain_error_response(exc)
        return Response(DeliveryTrackingSerializer(tracking).data)

    @action(detail=True, methods=["patch"])
    def location(self, request: Request, order_id: str | None = None) -> Response:
        dto = parse_dto(LocationDTO, request.data)
        try:
            tracking, applied = self._service.update_location(request.user, order_id, dto)
        except (TrackingNotFound, TrackingAccessDenied) as exc:
            return domain_error_response(exc)
        return Response({"applied": applied, "current_location": tracking.current_location})

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, order_id: str | None = None) -> Response:
        dto = parse_dto(TrackingStatusDTO, request.data)
        try:
            tracking = self._service.update_status(request.user, order_id, dto)
        except TRACKING_UPDATE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(DeliveryTrackingSerializer(tracking).data)

    @action(detail=True, methods=["post"])
    def complete(self, request: Request, order_id: str | None = None) -> Response:
        dto = parse_dto(DeliveryProofDTO, request.data)
        try:
            tracking = self._service.complete(request.user, order_id, dto)
        except TRACKING_UPDATE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(DeliveryTrackingSerializer(tracking).data)
