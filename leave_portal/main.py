"""Leave Portal — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from leave_portal.common.exceptions import register_exception_handlers
from leave_portal.common.rate_limit import limiter
from leave_portal.config import settings
from leave_portal.database import engine
from leave_portal.employees.router import router as employees_router
from leave_portal.leave.router import router as leave_router

logger = logging.getLogger("leave_portal")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Leave portal starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("Leave portal stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Leave Portal",
        description="Institutional leave accounting and approval service",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(leave_router, prefix="/api/v1/leaves", tags=["leave"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])

    return app


app = create_app()
