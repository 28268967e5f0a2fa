"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_portal.common.constants import (
    Department,
    HalfDaySegment,
    LeaveCategory,
    LeaveStatus,
)
from leave_portal.database import Base
from leave_portal.employees.models import Employee, _enum_values, _utcnow


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("to_date >= from_date", name="ck_leave_date_order"),
        sa.CheckConstraint("chargeable_days >= 1", name="ck_leave_chargeable_days"),
        sa.CheckConstraint(
            "(is_half_day AND half_day_segment IS NOT NULL) "
            "OR (NOT is_half_day AND half_day_segment IS NULL)",
            name="ck_leave_half_day_segment",
        ),
        sa.Index("ix_leave_requests_employee_status", "employee_id", "status"),
        sa.Index("ix_leave_requests_department_status", "department", "status"),
        sa.Index("ix_leave_requests_dates", "from_date", "to_date"),
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
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    chargeable_days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    is_half_day: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    half_day_segment: Mapped[Optional[HalfDaySegment]] = mapped_column(
        sa.Enum(HalfDaySegment, name="half_day_segment", values_callable=_enum_values),
    )
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status", values_callable=_enum_values),
        nullable=False,
        default=LeaveStatus.pending,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.String(200))
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id", ondelete="SET NULL"),
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    submitted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    # Snapshot of the applicant at submission time
    employee_name: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    employee_code: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    department: Mapped[Department] = mapped_column(
        sa.Enum(Department, name="department_name", values_callable=_enum_values),
        nullable=False,
    )

    # Relationships
    employee: Mapped[Employee] = relationship(
        back_populates="leave_requests", foreign_keys=[employee_id],
    )
    approver: Mapped[Optional[Employee]] = relationship(foreign_keys=[approved_by])

    def __repr__(self) -> str:
        return (
            f"<LeaveRequest {self.category.value} {self.from_date}..{self.to_date} "
            f"{self.status.value}>"
        )
