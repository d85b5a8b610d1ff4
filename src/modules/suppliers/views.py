"""Supplier and purchase order API views (back office only)."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.exceptions import StockNotFound
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.core.validators import UUID_PATTERN
from modules.finance.exceptions import FinanceAccountNotFound, InactiveAccount
from modules.suppliers.dtos import (
    ContactDTO,
    CreatePurchaseOrderDTO,
    PaySupplierDTO,
    PurchaseOrderStatusDTO,
    ReceivePurchaseOrderDTO,
    SupplierDTO,
    SupplierProductDTO,
    SupplierStatusDTO,
    UpdateSupplierDTO,
    UpdateSupplierProductDTO,
)
from modules.suppliers.exceptions import (
    ContactNotFound,
    DuplicateSupplierProduct,
    InvalidPurchaseOrder,
    InvalidPurchaseOrderStatus,
    InvalidSupplierPayment,
    OverReceipt,
    ProductNotFound,
    PurchaseOrderItemNotFound,
    PurchaseOrderNotFound,
    SupplierHasOpenOrders,
    SupplierNotFound,
    SupplierProductNotFound,
    SupplierUnavailable,
)
from modules.suppliers.factories import build_purchase_order_service, build_supplier_service
from modules.suppliers.filters import PurchaseOrderFilter, SupplierFilter
from modules.suppliers.serializers import (
    PurchaseOrderSerializer,
    SupplierProductSerializer,
    SupplierSerializer,
)

ACCOUNT_ERRORS = (FinanceAccountNotFound, InactiveAccount)
RECEIVE_ERRORS = (
    PurchaseOrderNotFound,
    PurchaseOrderItemNotFound,
    InvalidPurchaseOrderStatus,
    OverReceipt,
    StockNotFound,
    *ACCOUNT_ERRORS,
)


class SupplierViewSet(GenericViewSet):
    serializer_class = SupplierSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_supplier_service()

    def get_queryset(self):
        return self._service.list_suppliers()

    def list(self, request: Request) -> Response:
        queryset = SupplierFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(SupplierSerializer(page, many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(SupplierDTO, request.data)
        supplier = self._service.create_supplier(dto)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            supplier = self._service.get_supplier(pk)
        except SupplierNotFound as exc:
            return domain_error_response(exc)
        return Response(SupplierSerializer(supplier).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdateSupplierDTO, request.data)
        try:
            supplier = self._service.update_supplier(pk, dto)
        except SupplierNotFound as exc:
            return domain_error_response(exc)
        return Response(SupplierSerializer(supplier).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_supplier(pk)
        except (SupplierNotFound, SupplierHasOpenOrders) as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        return Response(self._service.stats())

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(SupplierStatusDTO, request.data)
        try:
            supplier = self._service.set_status(pk, dto.status)
        except SupplierNotFound as exc:
            return domain_error_response(exc)
        return Response(SupplierSerializer(supplier).data)

    @action(detail=True, methods=["post"])
    def contacts(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(ContactDTO, request.data)
        try:
            supplier = self._service.add_contact(pk, dto)
        except SupplierNotFound as exc:
            return domain_error_response(exc)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=["delete"],
        url_path=rf"contacts/(?P<contact_id>{UUID_PATTERN})",
    )
    def remove_contact(
        self, request: Request, pk: str | None = None, contact_id: str | None = None
    ) -> Response:
        try:
            supplier = self._service.remove_contact(pk, contact_id)
        except (SupplierNotFound, ContactNotFound) as exc:
            return domain_error_response(exc)
        return Response(SupplierSerializer(supplier).data)

    @action(detail=True, methods=["get", "post"])
    def products(self, request: Request, pk: str | None = None) -> Response:
        try:
            if request.method == "GET":
                offers = self._service.list_products(pk)
                return Response(SupplierProductSerializer(offers, many=True).data)
            dto = parse_dto(SupplierProductDTO, request.data)
            offer = self._service.add_product(pk, dto)
        except (SupplierNotFound, ProductNotFound, DuplicateSupplierProduct) as exc:
            return domain_error_response(exc)
        return Response(SupplierProductSerializer(offer).data, status=status.HTTP_201_CREATED)


class SupplierProductViewSet(GenericViewSet):
    """``/suppliers/products/{id}``: edit or drop one supplier listing."""

    serializer_class = SupplierProductSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_supplier_service()

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdateSupplierProductDTO, request.data)
        try:
            offer = self._service.update_product(pk, dto)
        except SupplierProductNotFound as exc:
            return domain_error_response(exc)
        return Response(SupplierProductSerializer(offer).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.remove_product(pk)
        except SupplierProductNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PurchaseOrderViewSet(GenericViewSet):
    serializer_class = PurchaseOrderSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_purchase_order_service()

    def get_queryset(self):
        return self._service.list_orders()

    def list(self, request: Request) -> Response:
        queryset = PurchaseOrderFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(PurchaseOrderSerializer(page, many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(CreatePurchaseOrderDTO, request.data)
        try:
            purchase_order = self._service.create_order(dto, created_by=request.user)
        except (
            SupplierNotFound,
            SupplierUnavailable,
            ProductNotFound,
            InvalidPurchaseOrder,
        ) as exc:
            return domain_error_response(exc)
        return Response(
            PurchaseOrderSerializer(purchase_order).data, status=status.HTTP_201_CREATED
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            purchase_order = self._service.get_order(pk)
        except PurchaseOrderNotFound as exc:
            return domain_error_response(exc)
        return Response(PurchaseOrderSerializer(purchase_order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_order(pk)
        except (PurchaseOrderNotFound, InvalidPurchaseOrderStatus) as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(PurchaseOrderStatusDTO, request.data)
        try:
            purchase_order = self._service.update_status(pk, dto, changed_by=request.user)
        except (PurchaseOrderNotFound, InvalidPurchaseOrderStatus) as exc:
            return domain_error_response(exc)
        return Response(PurchaseOrderSerializer(purchase_order).data)

    @action(detail=True, methods=["post"])
    def receive(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(ReceivePurchaseOrderDTO, request.data)
        try:
            purchase_order = self._service.receive(pk, dto, received_by=request.user)
        except RECEIVE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(PurchaseOrderSerializer(purchase_order).data)

    @action(detail=True, methods=["post"])
    def pay(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(PaySupplierDTO, request.data)
        try:
            purchase_order = self._service.pay(pk, dto, paid_by=request.user)
        except (PurchaseOrderNotFound, InvalidSupplierPayment, *ACCOUNT_ERRORS) as exc:
            return domain_error_response(exc)
        return Response(PurchaseOrderSerializer(purchase_order).data)
