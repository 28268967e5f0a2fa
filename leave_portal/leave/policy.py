"""Quota policy — entitlement ceilings per leave category and period.

Pure functions of their inputs; callers pass the reference date so period
boundaries are deterministic.

    cl   6 days per half-year (Jan-Jun, Jul-Dec), no carry across halves
    scl  4 days per half-year
    el   floor(max(0, working days since joining - approved leave days) / 2)
    hpl  10 days per 3-year tenure block (informational, stored counter rules)
    ccl  7 days per calendar year (informational, stored counter rules)
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel

from leave_portal.common.constants import LeaveCategory
from leave_portal.common.exceptions import UnknownCategory

HALF_YEAR_CEILINGS: dict[LeaveCategory, int] = {
    LeaveCategory.casual: 6,
    LeaveCategory.special_casual: 4,
}
HALF_PAY_ALLOTMENT = 10
HALF_PAY_BLOCK_YEARS = 3
CHILD_CARE_ANNUAL_CEILING = 7

# Categories whose balance is a computed view rather than a stored counter
COMPUTED_CATEGORIES = frozenset(HALF_YEAR_CEILINGS)


class QuotaPeriod(BaseModel):
    """Entitlement ceiling for the accounting period containing a date."""

    category: LeaveCategory
    amount: int
    period: str
    starts_on: date
    ends_on: date
    description: str


def coerce_category(value: Any) -> LeaveCategory:
    """Map a category code (or enum) onto ``LeaveCategory``."""
    if isinstance(value, LeaveCategory):
        return value
    try:
        return LeaveCategory(value)
    except ValueError:
        raise UnknownCategory(value) from None


def half_year_bounds(reference_date: date) -> tuple[str, date, date]:
    """Return ``(label, first_day, last_day)`` of the half containing the date."""
    if 1 <= reference_date.month <= 6:
        return "Jan-Jun", date(reference_date.year, 1, 1), date(reference_date.year, 6, 30)
    return "Jul-Dec", date(reference_date.year, 7, 1), date(reference_date.year, 12, 31)


def _tenure_block(date_of_joining: Optional[date], reference_date: date) -> tuple[date, date]:
    anchor = date_of_joining or date(reference_date.year, 1, 1)
    years = max(0, reference_date.year - anchor.year)
    if reference_date < _safe_date(anchor.year + years, anchor.month, anchor.day):
        years -= 1
    block = max(0, years) // HALF_PAY_BLOCK_YEARS
    start_year = anchor.year + block * HALF_PAY_BLOCK_YEARS
    starts_on = _safe_date(start_year, anchor.month, anchor.day)
    next_start = _safe_date(start_year + HALF_PAY_BLOCK_YEARS, anchor.month, anchor.day)
    return starts_on, date.fromordinal(next_start.toordinal() - 1)


def _safe_date(year: int, month: int, day: int) -> date:
    # 29 Feb anchors fall back to 28 Feb in non-leap years
    try:
        return date(year, month, day)
    except ValueError:
        return date(year, month, 28)


def current_ceiling(
    category: Any,
    reference_date: date,
    *,
    date_of_joining: Optional[date] = None,
) -> QuotaPeriod:
    """Ceiling for ``category`` in the period containing ``reference_date``.

    Raises:
        UnknownCategory: ``category`` is not one of the five codes.
        ValueError: earned leave has no fixed ceiling; use ``compute_earned``.
    """
    category = coerce_category(category)

    if category in HALF_YEAR_CEILINGS:
        amount = HALF_YEAR_CEILINGS[category]
        label, starts_on, ends_on = half_year_bounds(reference_date)
        ordinal = "First" if label == "Jan-Jun" else "Second"
        return QuotaPeriod(
            category=category,
            amount=amount,
            period=label,
            starts_on=starts_on,
            ends_on=ends_on,
            description=f"{ordinal} half-year quota ({label}): {amount} days",
        )

    if category == LeaveCategory.half_pay:
        starts_on, ends_on = _tenure_block(date_of_joining, reference_date)
        label = f"{starts_on.year}-{ends_on.year}"
        return QuotaPeriod(
            category=category,
            amount=HALF_PAY_ALLOTMENT,
            period=label,
            starts_on=starts_on,
            ends_on=ends_on,
            description=(
                f"Half pay leave allotment for service block {label}: "
                f"{HALF_PAY_ALLOTMENT} days"
            ),
        )

    if category == LeaveCategory.child_care:
        year = reference_date.year
        return QuotaPeriod(
            category=category,
            amount=CHILD_CARE_ANNUAL_CEILING,
            period=str(year),
            starts_on=date(year, 1, 1),
            ends_on=date(year, 12, 31),
            description=f"Annual child care leave ceiling: {CHILD_CARE_ANNUAL_CEILING} days",
        )

    raise ValueError("Earned leave has no fixed ceiling; use compute_earned().")


def compute_earned(working_days: int, leaves_taken: int) -> int:
    """Earned leave: half of the days actually worked, never negative."""
    return max(0, working_days - leaves_taken) // 2
