"""Common module — shared utilities for the leave portal."""

from leave_portal.common.audit import AuditTrail, create_audit_entry
from leave_portal.common.constants import (
    DEFAULT_LEDGER,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PERMISSIONS,
    Department,
    HalfDaySegment,
    LeaveCategory,
    LeaveStatus,
    UserRole,
)
from leave_portal.common.exceptions import (
    AlreadyProcessed,
    AppException,
    ConflictError,
    ForbiddenException,
    InsufficientBalance,
    InvalidDateRange,
    NotFoundException,
    OverlapConflict,
    UnknownCategory,
    ValidationException,
    register_exception_handlers,
)
from leave_portal.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "Department",
    "HalfDaySegment",
    "LeaveCategory",
    "LeaveStatus",
    "UserRole",
    "PERMISSIONS",
    "DEFAULT_LEDGER",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AlreadyProcessed",
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InsufficientBalance",
    "InvalidDateRange",
    "NotFoundException",
    "OverlapConflict",
    "UnknownCategory",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
