from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from django.utils import timezone

from modules.finance.reports import ReportPeriod

pytestmark = pytest.mark.unit

# 12:00 UTC is 16:00 in Dubai, same calendar day.
NOW = datetime(2026, 5, 20, 12, 0, tzinfo=dt_timezone.utc)


def _local_date(value):
    return timezone.localtime(value).date()


class TestResolve:
    def test_explicit_dates_win(self):
        period = ReportPeriod.resolve("year", date(2026, 1, 1), date(2026, 1, 31), now=NOW)
        assert period.label == "custom"
        assert _local_date(period.start) == date(2026, 1, 1)
        assert _local_date(period.end) == date(2026, 1, 31)

    def test_default_is_last_30_days(self):
        period = ReportPeriod.resolve(now=NOW)
        assert period.label == "last_30_days"
        assert period.start == timezone.localtime(NOW) - timedelta(days=30)
        assert _local_date(period.end) == date(2026, 5, 20)

    def test_today(self):
        period = ReportPeriod.resolve("today", now=NOW)
        start = timezone.localtime(period.start)
        assert (start.date(), start.hour, start.minute) == (date(2026, 5, 20), 0, 0)

    def test_month(self):
        assert _local_date(ReportPeriod.resolve("month", now=NOW).start) == date(2026, 5, 1)

    def test_quarter(self):
        assert _local_date(ReportPeriod.resolve("quarter", now=NOW).start) == date(2026, 4, 1)

    def test_year(self):
        assert _local_date(ReportPeriod.resolve("year", now=NOW).start) == date(2026, 1, 1)

    def test_week_is_rolling_seven_days(self):
        period = ReportPeriod.resolve("week", now=NOW)
        assert period.label == "week"
        assert period.start == timezone.localtime(NOW) - timedelta(days=7)

    def test_as_dict(self):
        period = ReportPeriod.resolve("month", now=NOW)
        assert period.as_dict()["period"] == "month"
