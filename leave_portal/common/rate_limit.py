"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance that can be imported by routers
for per-endpoint rate limiting, and wired into the FastAPI app in main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from leave_portal.config import settings

# Per client IP for all endpoints; the leave submission route tightens it.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
