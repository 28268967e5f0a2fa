"""Overlap detection between a proposed date range and existing requests.

Two inclusive ranges overlap iff ``a.from <= b.to and b.from <= a.to``.
Only pending and approved requests block; rejected ones free their dates.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.leave.models import LeaveRequest
from leave_portal.leave.repository import LeaveRequestRepository


def ranges_overlap(a_from: date, a_to: date, b_from: date, b_to: date) -> bool:
    return a_from <= b_to and b_from <= a_to


async def find_conflict(
    db: AsyncSession,
    employee_id: uuid.UUID,
    from_date: date,
    to_date: date,
    *,
    excluding_request_id: Optional[uuid.UUID] = None,
) -> Optional[LeaveRequest]:
    """First blocking request of the employee intersecting the range."""
    conflicts = await LeaveRequestRepository.find_overlapping(
        db,
        employee_id,
        from_date,
        to_date,
        excluding_request_id=excluding_request_id,
    )
    return conflicts[0] if conflicts else None


async def has_conflict(
    db: AsyncSession,
    employee_id: uuid.UUID,
    from_date: date,
    to_date: date,
    *,
    excluding_request_id: Optional[uuid.UUID] = None,
) -> bool:
    conflict = await find_conflict(
        db, employee_id, from_date, to_date,
        excluding_request_id=excluding_request_id,
    )
    return conflict is not None
