"""Employees router — registration, directory, (de)activation, tenure views."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.dependencies import get_current_user, require_permission
from leave_portal.common.constants import Department, UserRole
from leave_portal.common.pagination import PaginationParams
from leave_portal.database import get_db
from leave_portal.employees.models import Employee
from leave_portal.employees.schemas import EmployeeCreate, EmployeeOut
from leave_portal.employees.service import EmployeeService
from leave_portal.leave.schemas import BalanceSheet, EarnedLeaveDetails

router = APIRouter(prefix="", tags=["employees"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    actor: Employee = Depends(require_permission("profile:create")),
    db: AsyncSession = Depends(get_db),
):
    """Register a portal user with the opening leave ledger."""
    return await EmployeeService.create_employee(db, body, actor_id=actor.id)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("")
async def list_employees(
    role: Optional[UserRole] = Query(None),
    department: Optional[Department] = Query(None),
    is_active: Optional[bool] = Query(True),
    search: Optional[str] = Query(None, max_length=100),
    pagination: PaginationParams = Depends(),
    viewer: Employee = Depends(require_permission("profile:list")),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(
        db,
        viewer,
        role=role,
        department=department,
        is_active=is_active,
        search=search,
        pagination=pagination,
    )


# ── /me/earned-leave ────────────────────────────────────────────────

@router.get("/me/earned-leave", response_model=EarnedLeaveDetails)
async def my_earned_leave(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Working days since joining, leave taken and the earned-leave figure."""
    return await EmployeeService.earned_leave_details(db, employee)


@router.post("/me/earned-leave/recalculate", response_model=EarnedLeaveDetails)
async def recalculate_my_earned_leave(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Store the computed earned-leave figure as the current el balance."""
    return await EmployeeService.recalculate_earned_leave(db, employee)


# ── GET /{employee_id} ──────────────────────────────────────────────

@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, employee_id, viewer)


@router.get("/{employee_id}/quota", response_model=BalanceSheet)
async def employee_quota(
    employee_id: uuid.UUID,
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current cl/scl quota windows and all balances."""
    return await EmployeeService.quota(db, employee_id, viewer)


# ── PUT /{employee_id}/deactivate | reactivate ─────────────────────

@router.put("/{employee_id}/deactivate", response_model=EmployeeOut)
async def deactivate_employee(
    employee_id: uuid.UUID,
    actor: Employee = Depends(require_permission("profile:activate")),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.set_active(db, employee_id, actor, False)


@router.put("/{employee_id}/reactivate", response_model=EmployeeOut)
async def reactivate_employee(
    employee_id: uuid.UUID,
    actor: Employee = Depends(require_permission("profile:activate")),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.set_active(db, employee_id, actor, True)


# ── DELETE /{employee_id} ───────────────────────────────────────────

@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: uuid.UUID,
    actor: Employee = Depends(require_permission("profile:delete")),
    db: AsyncSession = Depends(get_db),
):
    await EmployeeService.delete_employee(db, employee_id, actor)
    return Response(status_code=204)
