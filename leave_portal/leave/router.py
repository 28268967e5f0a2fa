"""Leave router — apply, approve/reject, cancel, balances, approval queue.

All endpoints require authentication. Approval endpoints enforce role checks.
"""


import uuid
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.dependencies import get_current_user, require_permission
from leave_portal.common.constants import Department, LeaveStatus
from leave_portal.common.pagination import PaginationParams
from leave_portal.common.rate_limit import limiter
from leave_portal.config import settings
from leave_portal.database import get_db
from leave_portal.employees.models import Employee
from leave_portal.leave import ledger
from leave_portal.leave.schemas import (
    BalanceSheet,
    DepartmentSummary,
    LeaveDecision,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from leave_portal.leave.service import ApprovalEngine

router = APIRouter(prefix="", tags=["leave"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
async def apply_leave(
    request: Request,
    body: LeaveRequestCreate,
    employee: Employee = Depends(require_permission("leave:request")),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Validates dates, overlap and balance."""
    return await ApprovalEngine.submit(db, employee.id, body)


# ── GET /my-leaves ──────────────────────────────────────────────────

@router.get("/my-leaves")
async def my_leaves(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user's leave history, newest first."""
    return await ApprovalEngine.list_my_requests(
        db, employee.id, status=status, pagination=pagination,
    )


# ── GET /balances ───────────────────────────────────────────────────

@router.get("/balances", response_model=BalanceSheet)
async def my_balances(
    as_of: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current balance for every leave category."""
    reference_date = as_of or datetime.now(timezone.utc).date()
    return await ledger.balances(db, employee, reference_date=reference_date)


# ── GET /departments/{department}/summary ───────────────────────────

@router.get("/departments/{department}/summary", response_model=DepartmentSummary)
async def department_summary(
    department: Department,
    employee: Employee = Depends(require_permission("leave:review")),
    db: AsyncSession = Depends(get_db),
):
    """Request counts and approved days for one department."""
    return await ApprovalEngine.department_summary(db, department, viewer=employee)


# ── GET / (approval queue) ──────────────────────────────────────────

@router.get("")
async def approval_queue(
    status: Optional[LeaveStatus] = Query(None),
    department: Optional[Department] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(require_permission("leave:review")),
    db: AsyncSession = Depends(get_db),
):
    """Requests the caller may review. Department heads see their own
    department without other department heads' applications."""
    return await ApprovalEngine.approval_queue(
        db, employee, status=status, department=department, pagination=pagination,
    )


# ── GET /{request_id} ───────────────────────────────────────────────

@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave(
    request_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ApprovalEngine.get_request(db, request_id, employee)


# ── PUT /{request_id}/status ────────────────────────────────────────

@router.put("/{request_id}/status", response_model=LeaveRequestOut)
async def decide_leave(
    request_id: uuid.UUID,
    body: LeaveDecision,
    employee: Employee = Depends(require_permission("leave:decide")),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending leave request."""
    return await ApprovalEngine.decide(
        db,
        request_id,
        employee.id,
        body.status,
        rejection_reason=body.rejection_reason,
    )


# ── DELETE /{request_id} ────────────────────────────────────────────

@router.delete("/{request_id}", status_code=204)
async def cancel_leave(
    request_id: uuid.UUID,
    employee: Employee = Depends(require_permission("leave:cancel_own")),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw one of your own pending requests."""
    await ApprovalEngine.cancel(db, request_id, employee.id)
    return Response(status_code=204)
