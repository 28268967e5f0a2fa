"""Entitlement ledger — per-employee leave balances.

Casual and special-casual balances are derived on every read:
``ceiling(half-year) - approved days starting in that half``. Earned,
half-pay and child-care balances are the stored counters in
``leave_balances`` and are the only ones ever debited.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.constants import LeaveCategory
from leave_portal.common.exceptions import NotFoundException
from leave_portal.employees.models import Employee
from leave_portal.employees.repository import EmployeeRepository
from leave_portal.leave.calendar import working_days_since
from leave_portal.leave.policy import (
    COMPUTED_CATEGORIES,
    coerce_category,
    compute_earned,
    current_ceiling,
)
from leave_portal.leave.repository import LeaveRequestRepository
from leave_portal.leave.schemas import BalanceSheet, EarnedLeaveDetails

logger = logging.getLogger(__name__)


async def balance(
    db: AsyncSession,
    employee: Employee,
    category: Any,
    *,
    reference_date: date,
) -> int:
    """Available days for *category* as of *reference_date*."""
    category = coerce_category(category)

    if category in COMPUTED_CATEGORIES:
        quota = current_ceiling(category, reference_date)
        used = await LeaveRequestRepository.sum_approved_days(
            db,
            employee.id,
            category=category,
            window=(quota.starts_on, quota.ends_on),
        )
        return quota.amount - used

    ledger = await EmployeeRepository.ledger(db, employee.id)
    return ledger.get(category, 0)


async def balances(
    db: AsyncSession,
    employee: Employee,
    *,
    reference_date: date,
) -> BalanceSheet:
    """All five balances plus the casual/special-casual quota windows."""
    values = {
        category: await balance(db, employee, category, reference_date=reference_date)
        for category in LeaveCategory
    }
    return BalanceSheet(
        employee_id=employee.id,
        reference_date=reference_date,
        cl=values[LeaveCategory.casual],
        scl=values[LeaveCategory.special_casual],
        el=values[LeaveCategory.earned],
        hpl=values[LeaveCategory.half_pay],
        ccl=values[LeaveCategory.child_care],
        cl_quota=current_ceiling(LeaveCategory.casual, reference_date),
        scl_quota=current_ceiling(LeaveCategory.special_casual, reference_date),
    )


async def debit(
    db: AsyncSession,
    employee_id: uuid.UUID,
    category: Any,
    days: int,
) -> None:
    """Subtract *days* from a stored counter; no-op for cl/scl.

    The subtraction is a single UPDATE so concurrent debits never lose a
    write. Earned leave may go negative.

    Raises:
        UnknownCategory: *category* is not a leave code.
        NotFoundException: the employee has no ledger row for *category*.
    """
    category = coerce_category(category)
    if category in COMPUTED_CATEGORIES:
        return

    remaining = await EmployeeRepository.decrement_balance(db, employee_id, category, days)
    if remaining is None:
        raise NotFoundException("LeaveBalance", f"{employee_id}:{category.value}")
    logger.info(
        "Debited %s day(s) of %s for employee %s (remaining %s)",
        days, category.value, employee_id, remaining,
    )


async def earned_leave_details(
    db: AsyncSession,
    employee: Employee,
    *,
    today: date,
) -> EarnedLeaveDetails:
    """Earned leave computed from tenure and every approved day taken."""
    total_working_days = working_days_since(employee.date_of_joining, today)
    leaves_taken = await LeaveRequestRepository.sum_approved_days(db, employee.id)
    ledger = await EmployeeRepository.ledger(db, employee.id)
    return EarnedLeaveDetails(
        employee_id=employee.id,
        date_of_joining=employee.date_of_joining,
        as_of=today,
        total_working_days=total_working_days,
        leaves_taken=leaves_taken,
        actual_working_days=max(0, total_working_days - leaves_taken),
        earned_leave=compute_earned(total_working_days, leaves_taken),
        current_balance=ledger.get(LeaveCategory.earned, 0),
    )


async def recalculate_earned(
    db: AsyncSession,
    employee: Employee,
    *,
    today: date,
) -> EarnedLeaveDetails:
    """Overwrite the stored earned-leave counter with the computed value."""
    details = await earned_leave_details(db, employee, today=today)
    stored = await EmployeeRepository.set_balance(
        db, employee.id, LeaveCategory.earned, details.earned_leave,
    )
    if stored is None:
        raise NotFoundException("LeaveBalance", f"{employee.id}:{LeaveCategory.earned.value}")
    logger.info(
        "Recalculated earned leave for employee %s: %s -> %s",
        employee.id, details.current_balance, details.earned_leave,
    )
    return details.model_copy(update={"current_balance": stored})
