"""Enums and constants for the leave portal — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    department_head = "department-head"
    employee = "employee"


# ── Organisation ────────────────────────────────────────────────────

class Department(str, enum.Enum):
    computer_science = "Computer Science"
    information_technology = "Information Technology"
    electronics = "Electronics"
    mechanical = "Mechanical"
    civil = "Civil"
    management = "Management"
    human_resources = "Human Resources"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveCategory(str, enum.Enum):
    casual = "cl"
    special_casual = "scl"
    earned = "el"
    half_pay = "hpl"
    child_care = "ccl"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class HalfDaySegment(str, enum.Enum):
    first_half = "first-half"
    second_half = "second-half"


# Opening ledger for a newly created employee
DEFAULT_LEDGER: dict[LeaveCategory, int] = {
    LeaveCategory.casual: 12,
    LeaveCategory.special_casual: 8,
    LeaveCategory.earned: 0,
    LeaveCategory.half_pay: 10,
    LeaveCategory.child_care: 7,
}


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: [
        "leave:request",
        "leave:cancel_own",
    ],
    UserRole.department_head: [
        "leave:request",
        "leave:cancel_own",
        "leave:review",
        "leave:decide",
        "profile:list",
        "profile:activate",
    ],
    UserRole.admin: [
        "leave:review",
        "leave:decide",
        "profile:list",
        "profile:create",
        "profile:activate",
        "profile:delete",
    ],
}

# ── Leave request field bounds ──────────────────────────────────────

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
REJECTION_REASON_MAX_LENGTH = 200

# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
