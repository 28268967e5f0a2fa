"""Auth module — bearer-token validation and permission guards."""

from leave_portal.auth.dependencies import get_current_user, require_permission

__all__ = ["get_current_user", "require_permission"]
