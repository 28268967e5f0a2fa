"""Employee service layer — registration, listing, lifecycle, tenure views.

Business logic:
  - Employee code generation (prefix + joining year + 4-digit sequence)
  - Opening leave ledger seeded on registration
  - Department-scoped visibility and (de)activation for department heads
  - Earned-leave details / recalculation and the per-employee quota view
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.audit import create_audit_entry
from leave_portal.common.constants import DEFAULT_LEDGER, DEFAULT_PAGE_SIZE, Department, UserRole
from leave_portal.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leave_portal.common.pagination import PaginationParams, paginate
from leave_portal.config import settings
from leave_portal.employees.models import Employee
from leave_portal.employees.repository import EmployeeRepository
from leave_portal.employees.schemas import EmployeeCreate, EmployeeOut
from leave_portal.leave import ledger
from leave_portal.leave.schemas import BalanceSheet, EarnedLeaveDetails

logger = logging.getLogger(__name__)

CODE_SEQUENCE_WIDTH = 4


def next_employee_code(highest: Optional[str], prefix: str, year: int) -> str:
    """``highest``'s trailing sequence + 1, stamped with *year*."""
    sequence = 1
    if highest:
        tail = highest[-CODE_SEQUENCE_WIDTH:]
        if tail.isdigit():
            sequence = int(tail) + 1
    return f"{prefix}{year}{sequence:0{CODE_SEQUENCE_WIDTH}d}"


class EmployeeService:
    """Async employee operations."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await EmployeeRepository.get(db, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    def _ensure_visible(viewer: Employee, target: Employee) -> None:
        if viewer.role == UserRole.admin or viewer.id == target.id:
            return
        if viewer.role == UserRole.department_head and viewer.department == target.department:
            return
        raise ForbiddenException("Not authorized to access this profile.")

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
        today: Optional[date] = None,
    ) -> Employee:
        """Register an employee with a generated code and the opening ledger."""
        today = today or datetime.now(timezone.utc).date()

        if await EmployeeRepository.get_by_email(db, data.email) is not None:
            raise ConflictError("email", data.email)

        prefix = settings.EMPLOYEE_CODE_PREFIX
        highest = await EmployeeRepository.highest_code(db, prefix)
        employee = Employee(
            employee_code=next_employee_code(highest, prefix, today.year),
            name=data.name,
            email=data.email,
            role=data.role,
            department=data.department,
            date_of_joining=data.date_of_joining or today,
            is_active=True,
        )

        try:
            await EmployeeRepository.add(db, employee, DEFAULT_LEDGER)
        except IntegrityError as exc:
            err = str(exc.orig)
            if "employee_code" in err:
                raise ConflictError("employee_code", employee.employee_code)
            if "email" in err:
                raise ConflictError("email", data.email)
            raise

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            new_values={**data.model_dump(mode="json"), "employee_code": employee.employee_code},
        )
        logger.info("Registered employee %s (%s)", employee.employee_code, employee.role.value)
        return employee

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        viewer: Employee,
        *,
        role: Optional[UserRole] = None,
        department: Optional[Department] = None,
        is_active: Optional[bool] = True,
        search: Optional[str] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> dict[str, Any]:
        """Administrators list everyone; department heads only their department."""
        if viewer.role == UserRole.department_head:
            department = viewer.department
        elif viewer.role != UserRole.admin:
            raise ForbiddenException("Only administrators and department heads can list employees.")

        query = EmployeeRepository.filtered(department, role, is_active)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Employee.name.ilike(pattern),
                    Employee.email.ilike(pattern),
                    Employee.employee_code.ilike(pattern),
                )
            )

        rows, meta = await paginate(
            db,
            query,
            pagination or PaginationParams(page=1, page_size=DEFAULT_PAGE_SIZE, sort=None),
            model=Employee,
        )
        return {"data": [EmployeeOut.model_validate(row) for row in rows], "meta": meta}

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        viewer: Employee,
    ) -> Employee:
        employee = await EmployeeService._get(db, employee_id)
        EmployeeService._ensure_visible(viewer, employee)
        return employee

    # ── Lifecycle ───────────────────────────────────────────────────

    @staticmethod
    async def set_active(
        db: AsyncSession,
        employee_id: uuid.UUID,
        actor: Employee,
        active: bool,
    ) -> Employee:
        """Soft (de)activation. Department heads act on their department only."""
        employee = await EmployeeService._get(db, employee_id)
        verb = "activate" if active else "deactivate"

        if actor.role == UserRole.department_head:
            if employee.department != actor.department:
                raise ForbiddenException(f"You can only {verb} users from your department.")
        elif actor.role != UserRole.admin:
            raise ForbiddenException()
        if not active and employee.id == actor.id:
            raise ValidationException({"id": ["You cannot deactivate your own account."]})

        if employee.is_active == active:
            return employee

        employee.is_active = active
        await db.flush()

        await create_audit_entry(
            db,
            action=verb,
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor.id,
            old_values={"is_active": not active},
            new_values={"is_active": active},
        )
        logger.info("Employee %s %sd by %s", employee.employee_code, verb, actor.employee_code)
        return employee

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        actor: Employee,
    ) -> None:
        """Hard delete; ledger rows and leave requests go with the employee."""
        if actor.role != UserRole.admin:
            raise ForbiddenException("Only administrators can delete users.")
        employee = await EmployeeService._get(db, employee_id)
        if employee.id == actor.id:
            raise ValidationException({"id": ["You cannot delete your own account."]})

        snapshot = {
            "employee_code": employee.employee_code,
            "email": employee.email,
            "department": employee.department.value,
        }
        await EmployeeRepository.delete(db, employee)

        await create_audit_entry(
            db,
            action="delete",
            entity_type="employee",
            entity_id=employee_id,
            actor_id=actor.id,
            old_values=snapshot,
        )
        logger.info("Employee %s deleted by %s", snapshot["employee_code"], actor.employee_code)

    # ── Tenure views ────────────────────────────────────────────────

    @staticmethod
    async def earned_leave_details(
        db: AsyncSession,
        employee: Employee,
        *,
        today: Optional[date] = None,
    ) -> EarnedLeaveDetails:
        today = today or datetime.now(timezone.utc).date()
        return await ledger.earned_leave_details(db, employee, today=today)

    @staticmethod
    async def recalculate_earned_leave(
        db: AsyncSession,
        employee: Employee,
        *,
        today: Optional[date] = None,
    ) -> EarnedLeaveDetails:
        today = today or datetime.now(timezone.utc).date()
        details = await ledger.recalculate_earned(db, employee, today=today)

        await create_audit_entry(
            db,
            action="recalculate_earned_leave",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=employee.id,
            new_values={"el": details.current_balance},
        )
        return details

    @staticmethod
    async def quota(
        db: AsyncSession,
        employee_id: uuid.UUID,
        viewer: Employee,
        *,
        today: Optional[date] = None,
    ) -> BalanceSheet:
        """Half-year quota windows and all current balances of one employee."""
        employee = await EmployeeService._get(db, employee_id)
        EmployeeService._ensure_visible(viewer, employee)
        today = today or datetime.now(timezone.utc).date()
        return await ledger.balances(db, employee, reference_date=today)
