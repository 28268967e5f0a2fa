"""Employee Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from leave_portal.common.constants import Department, UserRole


class EmployeeCreate(BaseModel):
    """Payload for registering a portal user. The employee code is generated."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    role: UserRole = UserRole.employee
    department: Department
    date_of_joining: Optional[date] = Field(None, alias="dateOfJoining")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class EmployeeOut(BaseModel):
    """Employee profile with its stored ledger counters."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    email: str
    role: UserRole
    department: Department
    date_of_joining: date
    is_active: bool
    created_at: datetime
    updated_at: datetime
