from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.core.validators import UUID_PATTERN
from modules.promotions.dtos import DiscountCodeDTO, ValidatePromoDTO
from modules.promotions.exceptions import (
    DiscountCodeNotFound,
    DuplicateDiscountCode,
    InvalidPromoCode,
)
from modules.promotions.repositories.django_repository import DiscountCodeDjangoRepository
from modules.promotions.serializers import DiscountCodeSerializer
from modules.promotions.services import PromotionService


class DiscountCodeViewSet(GenericViewSet):
    """Staff CRUD plus the public ``validate`` action."""

    serializer_class = DiscountCodeSerializer
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = PromotionService(DiscountCodeDjangoRepository())

    def get_permissions(self):
        if self.action == "validate":
            return [AllowAny()]
        return [IsStaff()]

    def get_queryset(self):
        return self._service.list_codes()

    def list(self, request: Request) -> Response:
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(DiscountCodeSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            discount_code = self._service.get_code(pk)
        except DiscountCodeNotFound as exc:
            return domain_error_response(exc)
        return Response(DiscountCodeSerializer(discount_code).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(DiscountCodeDTO, request.data)
        try:
            discount_code = self._service.create_code(dto)
        except DuplicateDiscountCode as exc:
            return domain_error_response(exc)
        return Response(DiscountCodeSerializer(discount_code).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = DiscountCodeSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        if "code" in data:
            data["code"] = data["code"].strip().upper()
        try:
            discount_code = self._service.update_code(pk, data)
        except (DiscountCodeNotFound, DuplicateDiscountCode) as exc:
            return domain_error_response(exc)
        return Response(DiscountCodeSerializer(discount_code).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_code(pk)
        except DiscountCodeNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def validate(self, request: Request) -> Response:
        """POST /api/promotions/validate"""
        dto = parse_dto(ValidatePromoDTO, request.data)
        user_id = str(request.user.id) if request.user else None
        try:
            applied = self._service.validate(dto.code, dto.order_total, user_id=user_id)
        except InvalidPromoCode as exc:
            return domain_error_response(exc)
        discount_code = applied.discount_code
        return Response(
            {
                "valid": True,
                "code": discount_code.code,
                "type": discount_code.type,
                "value": discount_code.value,
                "discount": applied.discount,
            }
        )
