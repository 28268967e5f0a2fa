"""Leave Pydantic v2 schemas — request / response validation.

Request bodies use the portal's camelCase wire names (``leaveType``,
``fromDate`` …) and also accept the snake_case field names.

Naming conventions:
  - *Create / *Decision → request bodies (write)
  - *Out / *Sheet       → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leave_portal.common.constants import (
    REASON_MAX_LENGTH,
    REASON_MIN_LENGTH,
    Department,
    HalfDaySegment,
    LeaveCategory,
    LeaveStatus,
)
from leave_portal.leave.policy import QuotaPeriod


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for applying for leave."""

    model_config = ConfigDict(populate_by_name=True)

    leave_type: LeaveCategory = Field(..., alias="leaveType")
    # Parsed by the working-day calculator so malformed dates surface as
    # InvalidDateRange rather than a schema error
    from_date: Union[date, str] = Field(..., alias="fromDate")
    to_date: Union[date, str] = Field(..., alias="toDate")
    reason: str = Field(
        ...,
        min_length=REASON_MIN_LENGTH,
        max_length=REASON_MAX_LENGTH,
        description="Reason for leave",
    )
    is_half_day: bool = Field(False, alias="isHalfDay")
    half_day_type: Optional[HalfDaySegment] = Field(None, alias="halfDayType")

    @field_validator("reason", mode="before")
    @classmethod
    def strip_reason(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def validate_half_day(self) -> "LeaveRequestCreate":
        if self.is_half_day and self.half_day_type is None:
            raise ValueError("halfDayType is required for half-day leave.")
        if not self.is_half_day and self.half_day_type is not None:
            raise ValueError("halfDayType is only allowed for half-day leave.")
        return self


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Decision
# ═════════════════════════════════════════════════════════════════════


class LeaveDecision(BaseModel):
    """Payload for approving or rejecting a pending request."""

    model_config = ConfigDict(populate_by_name=True)

    status: LeaveStatus
    # Stored stripped and cut to 200 characters by the engine
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

    @field_validator("status")
    @classmethod
    def must_be_terminal(cls, value: LeaveStatus) -> LeaveStatus:
        if value == LeaveStatus.pending:
            raise ValueError("Status must be 'approved' or 'rejected'.")
        return value


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    employee_code: str
    department: Department
    category: LeaveCategory
    from_date: date
    to_date: date
    chargeable_days: int
    reason: str
    is_half_day: bool = False
    half_day_segment: Optional[HalfDaySegment] = None
    status: LeaveStatus
    rejection_reason: Optional[str] = None
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    submitted_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


class BalanceSheet(BaseModel):
    """Current balance for every category plus the active half-year quotas."""

    employee_id: uuid.UUID
    reference_date: date
    cl: int
    scl: int
    el: int
    hpl: int
    ccl: int
    cl_quota: QuotaPeriod
    scl_quota: QuotaPeriod


class EarnedLeaveDetails(BaseModel):
    """Breakdown of the earned-leave computation for one employee."""

    employee_id: uuid.UUID
    date_of_joining: date
    as_of: date
    total_working_days: int
    leaves_taken: int
    actual_working_days: int
    earned_leave: int
    current_balance: int


# ═════════════════════════════════════════════════════════════════════
# Reports
# ═════════════════════════════════════════════════════════════════════


class DepartmentSummary(BaseModel):
    """Request counts per status and approved days per category."""

    department: Department
    total: int
    pending: int
    approved: int
    rejected: int
    approved_days: dict[LeaveCategory, int]
