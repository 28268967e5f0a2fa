"""Auth dependencies — JWT validation, RBAC enforcement.

Access tokens are issued by the portal's identity service; this module only
verifies them. The caller's role is read from the employee row, never from
the token, so a role change takes effect on the next request.
"""

from __future__ import annotations

import uuid
from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.constants import PERMISSIONS
from leave_portal.common.exceptions import ForbiddenException
from leave_portal.config import settings
from leave_portal.database import get_db
from leave_portal.employees.models import Employee


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Validate the JWT and return the authenticated, active Employee."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    try:
        employee_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token subject.")

    employee = await db.get(Employee, employee_id)
    if employee is None or not employee.is_active:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    request.state.user_role = employee.role
    return employee


# ── Permission-based dependency ─────────────────────────────────────

def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(employee: Employee = Depends(get_current_user)) -> Employee:
        role_permissions = PERMISSIONS.get(employee.role, [])
        if permission not in role_permissions:
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{employee.role.value}'.",
            )
        return employee

    return _check
