"""Report period resolution."""

from datetime import date, datetime, time

import pytest

from mandi.middleware.exceptions import InvalidReportTypeError, ValidationError
from mandi.services.billing import ReportType, resolve_date_range


@pytest.mark.unit
class TestResolveDateRange:
    def test_daily_covers_whole_day(self):
        r = resolve_date_range("daily", on=date(2024, 1, 15))
        assert r.start == datetime(2024, 1, 15, 0, 0)
        assert r.end == datetime.combine(date(2024, 1, 15), time.max)
        assert r.contains(datetime(2024, 1, 15, 23, 59, 59, 998000))
        assert not r.contains(datetime(2024, 1, 16, 0, 0))

    def test_weekly_runs_sunday_to_saturday(self):
        # 2024-01-17 is a Wednesday
        r = resolve_date_range("weekly", on=date(2024, 1, 17))
        assert r.start.date() == date(2024, 1, 14)
        assert r.end.date() == date(2024, 1, 20)
        assert r.period == "2024-01-14 to 2024-01-20"

    def test_weekly_on_sunday_starts_that_day(self):
        r = resolve_date_range("weekly", on=date(2024, 1, 14))
        assert r.start.date() == date(2024, 1, 14)

    def test_monthly_handles_leap_february(self):
        r = resolve_date_range("monthly", on=date(2024, 2, 10))
        assert r.start.date() == date(2024, 2, 1)
        assert r.end.date() == date(2024, 2, 29)

    def test_yearly(self):
        r = resolve_date_range(ReportType.YEARLY, on=date(2024, 7, 4))
        assert r.start == datetime(2024, 1, 1)
        assert r.end.date() == date(2024, 12, 31)

    def test_custom_date_only_end_extends_to_end_of_day(self):
        r = resolve_date_range("custom", start=date(2024, 1, 1), end=date(2024, 1, 10))
        assert r.end == datetime.combine(date(2024, 1, 10), time.max)

    def test_custom_keeps_explicit_times(self):
        r = resolve_date_range(
            "custom", start=datetime(2024, 1, 1, 6), end=datetime(2024, 1, 1, 18)
        )
        assert r.start.hour == 6 and r.end.hour == 18

    def test_custom_start_after_end(self):
        with pytest.raises(ValidationError):
            resolve_date_range("custom", start=date(2024, 2, 1), end=date(2024, 1, 1))

    def test_custom_requires_both_bounds(self):
        with pytest.raises(ValidationError):
            resolve_date_range("custom", start=date(2024, 2, 1))

    @pytest.mark.parametrize("bad", ["hourly", "", "quarterly"])
    def test_unknown_type(self, bad):
        with pytest.raises(InvalidReportTypeError) as exc:
            resolve_date_range(bad, on=date(2024, 1, 1))
        assert exc.value.status_code == 400
        assert exc.value.error_code == "INVALID_REPORT_TYPE"

    def test_type_is_case_insensitive(self):
        assert resolve_date_range("DAILY", on=date(2024, 1, 1)).report_type is ReportType.DAILY
