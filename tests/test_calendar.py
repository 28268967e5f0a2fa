"""Working-day calculator tests — pure, no database."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from leave_portal.common.exceptions import InvalidDateRange
from leave_portal.leave.calendar import chargeable_days, parse_date, working_days_since


class TestChargeableDays:

    def test_full_week_counts_five(self):
        # 2024-01-01 is a Monday, 2024-01-07 a Sunday
        assert chargeable_days(date(2024, 1, 1), date(2024, 1, 7)) == 5

    def test_single_weekday(self):
        assert chargeable_days(date(2024, 1, 3), date(2024, 1, 3)) == 1

    def test_weekend_only_range_is_zero(self):
        assert chargeable_days(date(2024, 1, 6), date(2024, 1, 7)) == 0

    def test_span_across_two_weekends(self):
        # Fri 2024-01-05 → Mon 2024-01-15: Fri + 5 + Mon
        assert chargeable_days(date(2024, 1, 5), date(2024, 1, 15)) == 7

    def test_accepts_iso_strings_and_datetimes(self):
        assert chargeable_days("2024-01-01", "2024-01-05") == 5
        assert chargeable_days("2024-01-01T00:00:00.000Z", "2024-01-02T00:00:00Z") == 2
        assert chargeable_days(
            datetime(2024, 1, 1, 9, tzinfo=timezone.utc), date(2024, 1, 1),
        ) == 1

    def test_reversed_range_raises(self):
        with pytest.raises(InvalidDateRange) as exc_info:
            chargeable_days(date(2024, 1, 5), date(2024, 1, 1))
        assert exc_info.value.status_code == 422
        assert "toDate" in exc_info.value.errors

    def test_unparseable_date_raises(self):
        with pytest.raises(InvalidDateRange):
            chargeable_days("not-a-date", "2024-01-05")

    def test_leap_day_counts(self):
        # Thu 2024-02-29 → Fri 2024-03-01
        assert chargeable_days(date(2024, 2, 29), date(2024, 3, 1)) == 2


class TestParseDate:

    def test_date_passthrough(self):
        assert parse_date(date(2024, 7, 1)) == date(2024, 7, 1)

    def test_unsupported_type(self):
        with pytest.raises(InvalidDateRange):
            parse_date(20240101)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "value",
        ["2024-01-10garbage", "2024-01-10xyz-not-a-date", "2024-01-10 trailing"],
    )
    def test_trailing_text_is_rejected(self, value):
        with pytest.raises(InvalidDateRange) as exc_info:
            parse_date(value, "fromDate")
        assert "fromDate" in exc_info.value.errors

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_date("  2024-01-10  ") == date(2024, 1, 10)


class TestWorkingDaysSince:

    def test_counts_inclusive_weekdays(self):
        assert working_days_since(date(2024, 1, 1), date(2024, 1, 12)) == 10

    def test_future_joining_is_zero(self):
        assert working_days_since(date(2025, 1, 1), date(2024, 12, 31)) == 0
