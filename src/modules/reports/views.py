"""Sales, customer, inventory and order reports (back office only)."""

from __future__ import annotations

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.dtos import parse_dto
from modules.core.permissions import IsStaff
from modules.finance.dtos import ReportPeriodDTO
from modules.finance.reports import ReportPeriod
from modules.reports.dtos import ProductSalesQueryDTO, TimeSeriesQueryDTO
from modules.reports.factories import build_sales_report_service


def _period(dto: ReportPeriodDTO) -> ReportPeriod:
    return ReportPeriod.resolve(dto.period or "month", dto.start_date, dto.end_date)


class SalesReportView(APIView):
    """Base for the period-based reports; subclasses name the report method."""

    permission_classes = [IsStaff]
    report: str = ""

    def get(self, request: Request) -> Response:
        dto = parse_dto(ReportPeriodDTO, request.query_params.dict())
        service = build_sales_report_service()
        return Response(getattr(service, self.report)(_period(dto)))


class SalesView(SalesReportView):
    report = "sales"


class SalesByCategoryView(SalesReportView):
    report = "sales_by_category"


class CustomersView(SalesReportView):
    report = "customers"


class OrdersView(SalesReportView):
    report = "orders"


class SalesByProductView(APIView):
    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        dto = parse_dto(ProductSalesQueryDTO, request.query_params.dict())
        service = build_sales_report_service()
        return Response(service.sales_by_product(_period(dto), limit=dto.limit))


class SalesTimeseriesView(APIView):
    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        dto = parse_dto(TimeSeriesQueryDTO, request.query_params.dict())
        service = build_sales_report_service()
        return Response(service.sales_timeseries(_period(dto), group_by=dto.group_by))


class InventoryView(APIView):
    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        return Response(build_sales_report_service().inventory())
