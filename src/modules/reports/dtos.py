"""Report query DTOs; the period fields come from the finance reports."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from modules.finance.dtos import ReportPeriodDTO


class ProductSalesQueryDTO(ReportPeriodDTO):
    limit: int = Field(default=20, ge=1, le=100)


class TimeSeriesQueryDTO(ReportPeriodDTO):
    group_by: Literal["day", "week", "month"] = "day"
