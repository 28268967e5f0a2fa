"""Employee ORM models: Employee and its per-category leave ledger rows.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
Column names match the PostgreSQL schema defined in 001_initial_schema.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_portal.common.constants import Department, LeaveCategory, UserRole
from leave_portal.database import Base

if TYPE_CHECKING:
    from leave_portal.leave.models import LeaveRequest


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Portal user: employee, department head or administrator."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.Index("idx_employees_department", "department", "role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_code: Mapped[str] = mapped_column(
        sa.String(20), unique=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.employee,
    )
    department: Mapped[Department] = mapped_column(
        sa.Enum(Department, name="department_name", values_callable=_enum_values),
        nullable=False,
    )
    date_of_joining: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # ── Relationships ───────────────────────────────────────────────
    ledger: Mapped[list[LeaveBalance]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    leave_requests: Mapped[list["LeaveRequest"]] = relationship(
        back_populates="employee",
        foreign_keys="LeaveRequest.employee_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def is_department_head(self) -> bool:
        return self.role == UserRole.department_head

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code} {self.name!r} ({self.role.value})>"


# ═════════════════════════════════════════════════════════════════════
# Leave ledger
# ═════════════════════════════════════════════════════════════════════


class LeaveBalance(Base):
    """Signed counter for one (employee, category) pair.

    Only earned, half-pay and child-care rows are authoritative; casual and
    special-casual balances are recomputed from the half-year quota.
    """

    __tablename__ = "leave_balances"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "category", name="uq_leave_balance"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    category: Mapped[LeaveCategory] = mapped_column(
        sa.Enum(LeaveCategory, name="leave_category", values_callable=_enum_values),
        nullable=False,
    )
    balance: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="ledger")

    def __repr__(self) -> str:
        return f"<LeaveBalance {self.category.value}={self.balance}>"
