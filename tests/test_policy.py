"""Quota policy tests — pure, no database."""

from __future__ import annotations

from datetime import date

import pytest

from leave_portal.common.constants import LeaveCategory
from leave_portal.common.exceptions import UnknownCategory
from leave_portal.leave.policy import compute_earned, current_ceiling, half_year_bounds


class TestHalfYearCeilings:

    def test_casual_first_half_boundary(self):
        quota = current_ceiling("cl", date(2024, 6, 30))
        assert quota.amount == 6
        assert quota.period == "Jan-Jun"
        assert (quota.starts_on, quota.ends_on) == (date(2024, 1, 1), date(2024, 6, 30))

    def test_casual_second_half_boundary(self):
        quota = current_ceiling("cl", date(2024, 7, 1))
        assert quota.amount == 6
        assert quota.period == "Jul-Dec"
        assert quota.starts_on == date(2024, 7, 1)

    def test_special_casual_ceiling(self):
        assert current_ceiling(LeaveCategory.special_casual, date(2024, 3, 1)).amount == 4
        assert current_ceiling("scl", date(2024, 11, 1)).period == "Jul-Dec"

    def test_half_year_bounds(self):
        assert half_year_bounds(date(2024, 1, 1)) == ("Jan-Jun", date(2024, 1, 1), date(2024, 6, 30))
        assert half_year_bounds(date(2024, 12, 31))[0] == "Jul-Dec"


class TestOtherCeilings:

    def test_half_pay_block_from_joining(self):
        quota = current_ceiling("hpl", date(2025, 3, 1), date_of_joining=date(2020, 6, 15))
        assert quota.amount == 10
        # Blocks: 2020-06-15..2023-06-14, 2023-06-15..2026-06-14
        assert quota.starts_on == date(2023, 6, 15)
        assert quota.ends_on == date(2026, 6, 14)
        assert quota.period == "2023-2026"

    @pytest.mark.parametrize(
        "reference, starts_on, ends_on",
        [
            (date(2023, 2, 27), date(2020, 2, 29), date(2023, 2, 27)),
            (date(2023, 2, 28), date(2023, 2, 28), date(2026, 2, 27)),
            (date(2026, 2, 28), date(2026, 2, 28), date(2029, 2, 27)),
        ],
    )
    def test_half_pay_block_for_leap_day_joiner(self, reference, starts_on, ends_on):
        quota = current_ceiling("hpl", reference, date_of_joining=date(2020, 2, 29))
        assert quota.starts_on <= reference <= quota.ends_on
        assert (quota.starts_on, quota.ends_on) == (starts_on, ends_on)

    def test_half_pay_without_joining_date(self):
        quota = current_ceiling("hpl", date(2024, 5, 1))
        assert quota.amount == 10
        assert quota.starts_on == date(2024, 1, 1)

    def test_child_care_annual(self):
        quota = current_ceiling("ccl", date(2024, 9, 9))
        assert quota.amount == 7
        assert quota.period == "2024"

    def test_earned_leave_has_no_ceiling(self):
        with pytest.raises(ValueError):
            current_ceiling("el", date(2024, 1, 1))

    def test_unknown_category(self):
        with pytest.raises(UnknownCategory):
            current_ceiling("ml", date(2024, 1, 1))


class TestComputeEarned:

    def test_half_of_days_worked(self):
        assert compute_earned(200, 10) == 95

    def test_floors_odd_counts(self):
        assert compute_earned(201, 0) == 100

    def test_never_negative(self):
        assert compute_earned(5, 10) == 0
        assert compute_earned(0, 0) == 0
