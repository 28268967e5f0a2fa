"""Leave service layer — the approval engine.

Business logic:
  - Submission: date-range, overlap and balance checks, applicant snapshot
  - Approve / reject with a compare-and-swap on ``status`` and a ledger
    debit in the same unit of work
  - Withdrawal of pending requests by their owner
  - Single-request visibility, personal history and approval queues
  - Department leave summary
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.audit import create_audit_entry
from leave_portal.common.constants import (
    DEFAULT_PAGE_SIZE,
    REJECTION_REASON_MAX_LENGTH,
    Department,
    LeaveCategory,
    LeaveStatus,
    UserRole,
)
from leave_portal.common.exceptions import (
    AlreadyProcessed,
    ForbiddenException,
    InsufficientBalance,
    InvalidDateRange,
    NotFoundException,
    OverlapConflict,
)
from leave_portal.common.pagination import PaginationParams
from leave_portal.employees.models import Employee
from leave_portal.employees.repository import EmployeeRepository
from leave_portal.leave import ledger
from leave_portal.leave.calendar import chargeable_days, parse_date
from leave_portal.leave.models import LeaveRequest
from leave_portal.leave.overlap import find_conflict
from leave_portal.leave.policy import COMPUTED_CATEGORIES, current_ceiling
from leave_portal.leave.repository import LeaveRequestRepository
from leave_portal.leave.schemas import (
    DepartmentSummary,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from leave_portal.leave.workflow import LeaveAction, action_for, ensure_transition

logger = logging.getLogger(__name__)

# Roles that may apply for leave
APPLICANT_ROLES = (UserRole.employee, UserRole.department_head)


def _default_pagination() -> PaginationParams:
    return PaginationParams(page=1, page_size=DEFAULT_PAGE_SIZE, sort=None)


def _clean_rejection_reason(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()[:REJECTION_REASON_MAX_LENGTH]
    return value or None


# ═════════════════════════════════════════════════════════════════════
# ApprovalEngine
# ═════════════════════════════════════════════════════════════════════


class ApprovalEngine:
    """Async leave operations: submit, decide, cancel and the read views."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_request(db: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
        leave_request = await LeaveRequestRepository.get(db, request_id)
        if leave_request is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_request

    @staticmethod
    async def _get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await EmployeeRepository.get(db, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    def _can_act_on(approver: Employee, leave_request: LeaveRequest) -> bool:
        if approver.role == UserRole.admin:
            return True
        if approver.role == UserRole.department_head:
            return approver.department == leave_request.department
        return False

    @staticmethod
    def _paged(rows, meta) -> dict[str, Any]:
        return {
            "data": [LeaveRequestOut.model_validate(row) for row in rows],
            "meta": meta,
        }

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: LeaveRequestCreate,
        *,
        today: Optional[date] = None,
    ) -> LeaveRequestOut:
        """Create a pending leave request.

        Raises:
            NotFoundException: unknown or deactivated employee.
            ForbiddenException: administrators do not apply for leave.
            InvalidDateRange: malformed, reversed, past or weekend-only range.
            OverlapConflict: a pending/approved request covers these dates.
            InsufficientBalance: not enough cl/scl/hpl/ccl left.
        """
        today = today or datetime.now(timezone.utc).date()

        employee = await EmployeeRepository.get(db, employee_id)
        if employee is None or not employee.is_active:
            raise NotFoundException("Employee", str(employee_id))
        if employee.role not in APPLICANT_ROLES:
            raise ForbiddenException("Only employees and department heads can apply for leave.")

        # ── Dates ───────────────────────────────────────────────────
        from_date = parse_date(data.from_date, "fromDate")
        to_date = parse_date(data.to_date, "toDate")
        days = chargeable_days(from_date, to_date)
        if from_date < today:
            raise InvalidDateRange("From date cannot be in the past.", field="fromDate")
        if days == 0:
            raise InvalidDateRange(
                "No working days in the selected range (weekends are not charged)."
            )

        # ── Overlap ─────────────────────────────────────────────────
        conflict = await find_conflict(db, employee.id, from_date, to_date)
        if conflict is not None:
            raise OverlapConflict(conflict.id)

        # ── Balance (earned leave may go negative) ──────────────────
        category = data.leave_type
        if category != LeaveCategory.earned:
            available = await ledger.balance(db, employee, category, reference_date=from_date)
            if days > available:
                period = (
                    current_ceiling(category, from_date).period
                    if category in COMPUTED_CATEGORIES
                    else None
                )
                raise InsufficientBalance(category.value, available, days, period)

        leave_request = await LeaveRequestRepository.add(
            db,
            LeaveRequest(
                employee_id=employee.id,
                category=category,
                from_date=from_date,
                to_date=to_date,
                chargeable_days=days,
                reason=data.reason,
                is_half_day=data.is_half_day,
                half_day_segment=data.half_day_type if data.is_half_day else None,
                status=LeaveStatus.pending,
                employee_name=employee.name,
                employee_code=employee.employee_code,
                department=employee.department,
            ),
        )

        await create_audit_entry(
            db,
            action="submit",
            entity_type="leave_request",
            entity_id=leave_request.id,
            actor_id=employee.id,
            new_values={
                "category": category.value,
                "from_date": from_date.isoformat(),
                "to_date": to_date.isoformat(),
                "chargeable_days": days,
                "status": LeaveStatus.pending.value,
            },
        )
        logger.info(
            "Leave %s submitted by %s: %s %s..%s (%s day(s))",
            leave_request.id, employee.employee_code, category.value,
            from_date, to_date, days,
        )
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def decide(
        db: AsyncSession,
        request_id: uuid.UUID,
        approver_id: uuid.UUID,
        decision: LeaveStatus,
        *,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequestOut:
        """Approve or reject a pending request.

        The status flip only succeeds while the row is still ``pending``;
        the ledger debit for an approval runs in the same transaction, so
        a request is debited at most once however many approvers race.
        """
        now = now or datetime.now(timezone.utc)
        action = action_for(decision)

        leave_request = await ApprovalEngine._get_request(db, request_id)
        new_status = ensure_transition(leave_request.status, action, leave_request.id)

        approver = await ApprovalEngine._get_employee(db, approver_id)
        if not ApprovalEngine._can_act_on(approver, leave_request):
            raise ForbiddenException("Unauthorized to process this leave application.")

        reason = (
            _clean_rejection_reason(rejection_reason)
            if new_status == LeaveStatus.rejected
            else None
        )
        won = await LeaveRequestRepository.transition_status(
            db,
            leave_request.id,
            new_status,
            approved_by=approver.id,
            approved_at=now,
            rejection_reason=reason,
        )
        if not won:
            logger.warning(
                "Lost race deciding leave %s: no longer pending", leave_request.id,
            )
            raise AlreadyProcessed(leave_request.id)

        if new_status == LeaveStatus.approved:
            await ledger.debit(
                db,
                leave_request.employee_id,
                leave_request.category,
                leave_request.chargeable_days,
            )

        await db.refresh(leave_request)

        await create_audit_entry(
            db,
            action=action.value,
            entity_type="leave_request",
            entity_id=leave_request.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": new_status.value, "rejection_reason": reason},
        )
        logger.info(
            "Leave %s %s by %s", leave_request.id, new_status.value, approver.employee_code,
        )
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel(
        db: AsyncSession,
        request_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> None:
        """Withdraw the caller's own pending request. No ledger change."""
        leave_request = await ApprovalEngine._get_request(db, request_id)
        if leave_request.employee_id != employee_id:
            raise ForbiddenException("You can only cancel your own leave applications.")
        ensure_transition(leave_request.status, LeaveAction.cancel, leave_request.id)

        snapshot = {
            "category": leave_request.category.value,
            "from_date": leave_request.from_date.isoformat(),
            "to_date": leave_request.to_date.isoformat(),
            "status": leave_request.status.value,
        }
        if not await LeaveRequestRepository.delete_if_pending(db, leave_request.id):
            logger.warning(
                "Lost race cancelling leave %s: no longer pending", leave_request.id,
            )
            raise AlreadyProcessed(leave_request.id)
        db.expunge(leave_request)

        await create_audit_entry(
            db,
            action="cancel",
            entity_type="leave_request",
            entity_id=request_id,
            actor_id=employee_id,
            old_values=snapshot,
        )
        logger.info("Leave %s cancelled by its owner", request_id)

    # ─────────────────────────────────────────────────────────────────
    # Read views
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Employee,
    ) -> LeaveRequestOut:
        """Employees see their own requests, department heads their
        department's, administrators everything."""
        leave_request = await ApprovalEngine._get_request(db, request_id)

        if viewer.role == UserRole.admin:
            allowed = True
        elif viewer.role == UserRole.department_head:
            allowed = (
                leave_request.employee_id == viewer.id
                or leave_request.department == viewer.department
            )
        else:
            allowed = leave_request.employee_id == viewer.id

        if not allowed:
            raise ForbiddenException("You do not have access to this leave application.")
        return LeaveRequestOut.model_validate(leave_request)

    @staticmethod
    async def list_my_requests(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        status: Optional[LeaveStatus] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> dict[str, Any]:
        rows, meta = await LeaveRequestRepository.find_many(
            db,
            pagination or _default_pagination(),
            employee_id=employee_id,
            status=status,
        )
        return ApprovalEngine._paged(rows, meta)

    @staticmethod
    async def approval_queue(
        db: AsyncSession,
        approver: Employee,
        *,
        status: Optional[LeaveStatus] = None,
        department: Optional[Department] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> dict[str, Any]:
        """Requests an approver may act on.

        Department heads are limited to their own department and never see
        requests filed by department heads, their own included.
        """
        if approver.role == UserRole.admin:
            scope = {"department": department}
        elif approver.role == UserRole.department_head:
            scope = {"department": approver.department, "exclude_department_heads": True}
        else:
            raise ForbiddenException("Only administrators and department heads can review leave.")

        rows, meta = await LeaveRequestRepository.find_many(
            db,
            pagination or _default_pagination(),
            status=status,
            **scope,
        )
        return ApprovalEngine._paged(rows, meta)

    @staticmethod
    async def department_summary(
        db: AsyncSession,
        department: Department,
        *,
        viewer: Optional[Employee] = None,
    ) -> DepartmentSummary:
        if viewer is not None and not (
            viewer.role == UserRole.admin
            or (viewer.role == UserRole.department_head and viewer.department == department)
        ):
            raise ForbiddenException("You do not have access to this department's report.")

        counts = await LeaveRequestRepository.status_counts(db, department)
        approved_days = await LeaveRequestRepository.approved_days_by_category(db, department)
        return DepartmentSummary(
            department=department,
            total=sum(counts.values()),
            pending=counts[LeaveStatus.pending],
            approved=counts[LeaveStatus.approved],
            rejected=counts[LeaveStatus.rejected],
            approved_days=approved_days,
        )
