"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://leave.portal/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        self.extra = extra
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ConflictError(AppException):
    """409 — unique-constraint / duplicate."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    """403 — actor lacks rights over the target employee/department."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


# ── Leave engine errors ─────────────────────────────────────────────

class InvalidDateRange(AppException):
    """422 — malformed dates, end before start, or start in the past."""

    def __init__(self, detail: str, field: str = "dates") -> None:
        super().__init__(
            status_code=422,
            error_type="invalid-date-range",
            title="Invalid Date Range",
            detail=detail,
            errors={field: [detail]},
        )


class OverlapConflict(AppException):
    """409 — a pending or approved request already covers these dates."""

    def __init__(self, conflicting_request_id: Any = None) -> None:
        self.conflicting_request_id = conflicting_request_id
        super().__init__(
            status_code=409,
            error_type="overlap-conflict",
            title="Overlapping Leave",
            detail=(
                "Leave application overlaps with existing approved "
                "or pending leave."
            ),
            extra=(
                {"conflictingRequestId": str(conflicting_request_id)}
                if conflicting_request_id is not None
                else None
            ),
        )


class InsufficientBalance(AppException):
    """422 — requested days exceed the category's entitlement."""

    def __init__(
        self,
        category: str,
        available: int,
        requested: int,
        period: Optional[str] = None,
    ) -> None:
        self.category = category
        self.available = available
        self.requested = requested
        period_text = f" ({period})" if period else ""
        detail = (
            f"Insufficient {category.upper()} balance{period_text}. "
            f"Available: {available} days, Required: {requested} days"
        )
        super().__init__(
            status_code=422,
            error_type="insufficient-balance",
            title="Insufficient Balance",
            detail=detail,
            errors={"balance": [detail]},
            extra={"available": available, "requested": requested},
        )


class AlreadyProcessed(AppException):
    """409 — the request has already left the pending state."""

    def __init__(self, request_id: Any, status: Optional[str] = None) -> None:
        self.request_id = request_id
        detail = "Leave application has already been processed"
        if status:
            detail += f" (status: {status})"
        super().__init__(
            status_code=409,
            error_type="already-processed",
            title="Already Processed",
            detail=detail + ".",
        )


class UnknownCategory(ValueError):
    """Integration defect: a leave category outside the five known codes."""

    def __init__(self, category: Any) -> None:
        self.category = category
        super().__init__(f"Unknown leave category: {category!r}")


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    if exc.extra:
        body.update(exc.extra)
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
