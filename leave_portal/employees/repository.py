"""Persistence for employees and their leave ledger rows."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.constants import Department, LeaveCategory, UserRole
from leave_portal.employees.models import Employee, LeaveBalance


class EmployeeRepository:
    """Async queries over ``employees`` and ``leave_balances``."""

    @staticmethod
    async def get(db: AsyncSession, employee_id: uuid.UUID) -> Optional[Employee]:
        return await db.get(Employee, employee_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[Employee]:
        result = await db.execute(select(Employee).where(Employee.email == email))
        return result.scalars().first()

    @staticmethod
    async def add(
        db: AsyncSession,
        employee: Employee,
        ledger: dict[LeaveCategory, int],
    ) -> Employee:
        """Persist *employee* with one ledger row per category."""
        db.add(employee)
        await db.flush()
        for category, amount in ledger.items():
            db.add(LeaveBalance(employee_id=employee.id, category=category, balance=amount))
        await db.flush()
        return employee

    @staticmethod
    async def delete(db: AsyncSession, employee: Employee) -> None:
        await db.delete(employee)
        await db.flush()

    @staticmethod
    def filtered(
        department: Optional[Department] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ):
        """Base SELECT for employee listings, newest first."""
        query = select(Employee)
        if department is not None:
            query = query.where(Employee.department == department)
        if role is not None:
            query = query.where(Employee.role == role)
        if is_active is not None:
            query = query.where(Employee.is_active.is_(is_active))
        return query.order_by(Employee.created_at.desc())

    @staticmethod
    async def find_many(
        db: AsyncSession,
        *,
        department: Optional[Department] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[Employee]:
        result = await db.execute(
            EmployeeRepository.filtered(department, role, is_active)
        )
        return result.scalars().all()

    @staticmethod
    async def highest_code(db: AsyncSession, prefix: str) -> Optional[str]:
        """Greatest ``employee_code`` starting with *prefix*, if any."""
        result = await db.execute(
            select(Employee.employee_code)
            .where(Employee.employee_code.startswith(prefix))
            .order_by(Employee.employee_code.desc())
            .limit(1)
        )
        return result.scalar()

    # ── Ledger ──────────────────────────────────────────────────────

    @staticmethod
    async def ledger(db: AsyncSession, employee_id: uuid.UUID) -> dict[LeaveCategory, int]:
        result = await db.execute(
            select(LeaveBalance.category, LeaveBalance.balance).where(
                LeaveBalance.employee_id == employee_id,
            )
        )
        return {category: amount for category, amount in result.all()}

    @staticmethod
    async def decrement_balance(
        db: AsyncSession,
        employee_id: uuid.UUID,
        category: LeaveCategory,
        days: int,
    ) -> Optional[int]:
        """Atomically subtract *days*; returns the new balance or ``None``
        when the employee has no row for *category*."""
        result = await db.execute(
            update(LeaveBalance)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.category == category,
            )
            .values(balance=LeaveBalance.balance - days)
            .returning(LeaveBalance.balance)
            .execution_options(synchronize_session=False)
        )
        return result.scalar()

    @staticmethod
    async def set_balance(
        db: AsyncSession,
        employee_id: uuid.UUID,
        category: LeaveCategory,
        amount: int,
    ) -> Optional[int]:
        result = await db.execute(
            update(LeaveBalance)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.category == category,
            )
            .values(balance=amount)
            .returning(LeaveBalance.balance)
            .execution_options(synchronize_session=False)
        )
        return result.scalar()
