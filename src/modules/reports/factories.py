from __future__ import annotations

from modules.catalog.repositories.django_repository import StockDjangoRepository
from modules.reports.services import SalesReportService


def build_sales_report_service() -> SalesReportService:
    return SalesReportService(StockDjangoRepository())
