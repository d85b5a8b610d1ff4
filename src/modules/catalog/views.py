"""Catalog API views.

Browsing is public; product writes are admin only, category writes and
the whole stock surface are staff only.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.dtos import (
    BulkStockMovementDTO,
    CategoryDTO,
    CreateProductDTO,
    RestockDTO,
    StockMovementDTO,
    StockThresholdsDTO,
    UpdateProductDTO,
)
from modules.catalog.exceptions import (
    CategoryNotFound,
    DuplicateSku,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
    StockNotFound,
)
from modules.catalog.filters import ProductFilter, StockMovementFilter
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    ProductDjangoRepository,
    StockDjangoRepository,
)
from modules.catalog.serializers import (
    AdminProductSerializer,
    CategorySerializer,
    ProductSerializer,
    StockMovementSerializer,
    StockSerializer,
)
from modules.catalog.services import CategoryService, ProductService, StockService
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsAdmin, IsStaff, is_staff_user
from modules.core.validators import UUID_PATTERN


def product_service() -> ProductService:
    return ProductService(
        ProductDjangoRepository(), CategoryDjangoRepository(), StockDjangoRepository()
    )


class ProductViewSet(GenericViewSet):
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["price", "name", "created_at"]
    ordering = ["name"]
    lookup_value_regex = UUID_PATTERN
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = product_service()

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        return [IsAdmin()]

    def get_queryset(self):
        return self._service.list_products(include_inactive=is_staff_user(self.request.user))

    def _serializer_class(self):
        return AdminProductSerializer if is_staff_user(self.request.user) else ProductSerializer

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(self._serializer_class()(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            product = self._service.get_product(pk)
        except ProductNotFound as exc:
            return domain_error_response(exc)
        if not product.is_active and not is_staff_user(request.user):
            return domain_error_response(ProductNotFound())
        return Response(self._serializer_class()(product).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(CreateProductDTO, request.data)
        try:
            product = self._service.create_product(dto)
        except (DuplicateSku, CategoryNotFound) as exc:
            return domain_error_response(exc)
        return Response(AdminProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdateProductDTO, request.data)
        try:
            product = self._service.update_product(pk, dto)
        except (ProductNotFound, CategoryNotFound, InvalidQuantity) as exc:
            return domain_error_response(exc)
        return Response(AdminProductSerializer(product).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_product(pk)
        except ProductNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(GenericViewSet):
    serializer_class = CategorySerializer
    lookup_value_regex = UUID_PATTERN
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService(CategoryDjangoRepository())

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        return [IsStaff()]

    def get_queryset(self):
        return self._service.list_categories(include_inactive=is_staff_user(self.request.user))

    def list(self, request: Request) -> Response:
        return Response(CategorySerializer(self.get_queryset(), many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            category = self._service.get_category(pk)
        except CategoryNotFound as exc:
            return domain_error_response(exc)
        return Response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(CategoryDTO, request.data)
        category = self._service.create_category(dto)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = CategorySerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            category = self._service.update_category(pk, serializer.validated_data)
        except CategoryNotFound as exc:
            return domain_error_response(exc)
        return Response(CategorySerializer(category).data)


class StockViewSet(GenericViewSet):
    """Stock levels and movements, addressed by product id."""

    permission_classes = [IsStaff]
    serializer_class = StockSerializer
    lookup_field = "product_id"
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = StockService(StockDjangoRepository())

    def get_queryset(self):
        return self._service.list_stock()

    def list(self, request: Request) -> Response:
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(StockSerializer(page, many=True).data)

    def retrieve(self, request: Request, product_id: str | None = None) -> Response:
        try:
            stock = self._service.get_stock(product_id)
        except StockNotFound as exc:
            return domain_error_response(exc)
        return Response(StockSerializer(stock).data)

    @action(detail=False, methods=["post"], url_path="update")
    def apply_movement(self, request: Request) -> Response:
        dto = parse_dto(StockMovementDTO, request.data)
        try:
            movement = self._service.apply_movement(dto, performed_by=request.user)
        except (StockNotFound, InsufficientStock, InvalidQuantity) as exc:
            return domain_error_response(exc)
        stock = self._service.get_stock(str(dto.product_id))
        return Response(
            {
                "movement": StockMovementSerializer(movement).data,
                "stock": StockSerializer(stock).data,
            }
        )

    @action(detail=False, methods=["post"], url_path="bulk-update")
    def bulk_update(self, request: Request) -> Response:
        dto = parse_dto(BulkStockMovementDTO, request.data)
        try:
            movements = self._service.bulk_update(dto.movements, performed_by=request.user)
        except (StockNotFound, InsufficientStock, InvalidQuantity) as exc:
            return domain_error_response(exc)
        return Response(
            {
                "updated": len(movements),
                "movements": StockMovementSerializer(movements, many=True).data,
            }
        )

    @action(
        detail=False,
        methods=["post"],
        url_path=rf"restock/(?P<restock_product_id>{UUID_PATTERN})",
    )
    def restock(self, request: Request, restock_product_id: str | None = None) -> Response:
        dto = parse_dto(RestockDTO, request.data)
        try:
            stock = self._service.restock(restock_product_id, dto, performed_by=request.user)
        except StockNotFound as exc:
            return domain_error_response(exc)
        return Response(StockSerializer(stock).data)

    @action(detail=True, methods=["patch"])
    def thresholds(self, request: Request, product_id: str | None = None) -> Response:
        dto = parse_dto(StockThresholdsDTO, request.data)
        try:
            stock = self._service.update_thresholds(product_id, dto)
        except StockNotFound as exc:
            return domain_error_response(exc)
        return Response(StockSerializer(stock).data)

    @action(detail=False, methods=["get"])
    def alerts(self, request: Request) -> Response:
        alerts = self._service.alerts()
        return Response(
            {"count": alerts.count(), "results": StockSerializer(alerts, many=True).data}
        )

    @action(detail=False, methods=["get"])
    def movements(self, request: Request) -> Response:
        queryset = StockMovementFilter(request.query_params, queryset=self._service.movements()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
