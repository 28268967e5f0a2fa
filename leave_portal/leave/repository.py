"""Persistence for leave requests.

Status changes and withdrawals are conditional writes (``WHERE status =
'pending'``); the affected row count tells the caller whether it won.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional, Sequence

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.constants import (
    Department,
    LeaveCategory,
    LeaveStatus,
    UserRole,
)
from leave_portal.common.pagination import PaginationMeta, PaginationParams, paginate
from leave_portal.employees.models import Employee
from leave_portal.leave.models import LeaveRequest

# Requests that still hold their dates
BLOCKING_STATUSES = (LeaveStatus.pending, LeaveStatus.approved)


class LeaveRequestRepository:
    """Async queries over ``leave_requests``."""

    @staticmethod
    async def get(db: AsyncSession, request_id: uuid.UUID) -> Optional[LeaveRequest]:
        return await db.get(LeaveRequest, request_id)

    @staticmethod
    async def add(db: AsyncSession, leave_request: LeaveRequest) -> LeaveRequest:
        db.add(leave_request)
        await db.flush()
        return leave_request

    @staticmethod
    async def delete_if_pending(db: AsyncSession, request_id: uuid.UUID) -> bool:
        """Delete the request only while it is still pending."""
        result = await db.execute(
            delete(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def transition_status(
        db: AsyncSession,
        request_id: uuid.UUID,
        new_status: LeaveStatus,
        *,
        approved_by: Optional[uuid.UUID] = None,
        approved_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a pending request to *new_status*; ``False`` if it had
        already left ``pending``."""
        values: dict[str, Any] = {"status": new_status}
        if new_status == LeaveStatus.approved:
            values["approved_by"] = approved_by
            values["approved_at"] = approved_at
        if rejection_reason is not None:
            values["rejection_reason"] = rejection_reason

        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def find_overlapping(
        db: AsyncSession,
        employee_id: uuid.UUID,
        from_date: date,
        to_date: date,
        *,
        excluding_request_id: Optional[uuid.UUID] = None,
    ) -> Sequence[LeaveRequest]:
        """Pending/approved requests of the employee intersecting the range."""
        query = select(LeaveRequest).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(BLOCKING_STATUSES),
            LeaveRequest.from_date <= to_date,
            LeaveRequest.to_date >= from_date,
        )
        if excluding_request_id is not None:
            query = query.where(LeaveRequest.id != excluding_request_id)
        result = await db.execute(query.order_by(LeaveRequest.from_date))
        return result.scalars().all()

    @staticmethod
    def filtered(
        *,
        employee_id: Optional[uuid.UUID] = None,
        department: Optional[Department] = None,
        status: Optional[LeaveStatus] = None,
        exclude_department_heads: bool = False,
    ) -> Select:
        """Base SELECT for request listings, newest submission first."""
        query = select(LeaveRequest)
        if employee_id is not None:
            query = query.where(LeaveRequest.employee_id == employee_id)
        if department is not None:
            query = query.where(LeaveRequest.department == department)
        if status is not None:
            query = query.where(LeaveRequest.status == status)
        if exclude_department_heads:
            heads = select(Employee.id).where(Employee.role == UserRole.department_head)
            query = query.where(LeaveRequest.employee_id.not_in(heads))
        return query.order_by(LeaveRequest.submitted_at.desc())

    @staticmethod
    async def find_many(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        department: Optional[Department] = None,
        status: Optional[LeaveStatus] = None,
        exclude_department_heads: bool = False,
    ) -> tuple[Sequence[LeaveRequest], PaginationMeta]:
        query = LeaveRequestRepository.filtered(
            employee_id=employee_id,
            department=department,
            status=status,
            exclude_department_heads=exclude_department_heads,
        )
        return await paginate(db, query, params, model=LeaveRequest)

    @staticmethod
    async def sum_approved_days(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        category: Optional[LeaveCategory] = None,
        window: Optional[tuple[date, date]] = None,
    ) -> int:
        """Total approved chargeable days, optionally for one category and
        for requests starting inside ``window`` (inclusive)."""
        query = select(func.coalesce(func.sum(LeaveRequest.chargeable_days), 0)).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status == LeaveStatus.approved,
        )
        if category is not None:
            query = query.where(LeaveRequest.category == category)
        if window is not None:
            starts_on, ends_on = window
            query = query.where(
                LeaveRequest.from_date >= starts_on,
                LeaveRequest.from_date <= ends_on,
            )
        result = await db.execute(query)
        return int(result.scalar_one())

    @staticmethod
    async def status_counts(
        db: AsyncSession,
        department: Department,
    ) -> dict[LeaveStatus, int]:
        result = await db.execute(
            select(LeaveRequest.status, func.count())
            .where(LeaveRequest.department == department)
            .group_by(LeaveRequest.status)
        )
        counts = {status: 0 for status in LeaveStatus}
        counts.update({status: total for status, total in result.all()})
        return counts

    @staticmethod
    async def approved_days_by_category(
        db: AsyncSession,
        department: Department,
    ) -> dict[LeaveCategory, int]:
        result = await db.execute(
            select(LeaveRequest.category, func.sum(LeaveRequest.chargeable_days))
            .where(
                LeaveRequest.department == department,
                LeaveRequest.status == LeaveStatus.approved,
            )
            .group_by(LeaveRequest.category)
        )
        totals = {category: 0 for category in LeaveCategory}
        totals.update({category: int(days or 0) for category, days in result.all()})
        return totals
