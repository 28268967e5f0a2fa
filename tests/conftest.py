"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (calendar, policy, ledger, leave, employees).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_portal.common.constants import (
    DEFAULT_LEDGER,
    Department,
    LeaveCategory,
    LeaveStatus,
    UserRole,
)
from leave_portal.config import settings
from leave_portal.database import Base, get_db
from leave_portal.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (e.g. Employee → LeaveRequest, AuditTrail → Employee)
import leave_portal.common.audit  # noqa: F401
import leave_portal.employees.models  # noqa: F401
import leave_portal.leave.models  # noqa: F401

from leave_portal.employees.models import Employee, LeaveBalance
from leave_portal.leave.models import LeaveRequest


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# ON DELETE CASCADE / SET NULL need foreign keys switched on in SQLite
@event.listens_for(engine.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    role: UserRole = UserRole.employee,
    department: Department = Department.computer_science,
    date_of_joining: date = date(2023, 1, 2),
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_code=f"TST-{uuid.uuid4().hex[:8].upper()}",
        name=name,
        email=email or f"user.{uuid.uuid4().hex[:8]}@college.edu",
        role=role,
        department=department,
        date_of_joining=date_of_joining,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def _seed_employee(
    db: AsyncSession,
    *,
    ledger: Optional[dict[LeaveCategory, int]] = None,
    **overrides,
) -> Employee:
    """Insert an employee with one ledger row per category."""
    data = _make_employee(**overrides)
    employee = Employee(**data)
    db.add(employee)
    await db.flush()
    for category, amount in {**DEFAULT_LEDGER, **(ledger or {})}.items():
        db.add(LeaveBalance(employee_id=employee.id, category=category, balance=amount))
    await db.flush()
    return employee


async def _seed_request(
    db: AsyncSession,
    employee: Employee,
    *,
    category: LeaveCategory = LeaveCategory.casual,
    from_date: date = date(2024, 1, 8),
    to_date: date = date(2024, 1, 9),
    chargeable_days: Optional[int] = None,
    status: LeaveStatus = LeaveStatus.pending,
) -> LeaveRequest:
    """Insert a leave request directly, bypassing the engine's checks."""
    leave_request = LeaveRequest(
        employee_id=employee.id,
        category=category,
        from_date=from_date,
        to_date=to_date,
        chargeable_days=chargeable_days or max(1, (to_date - from_date).days + 1),
        reason="Seeded for tests",
        status=status,
        employee_name=employee.name,
        employee_code=employee.employee_code,
        department=employee.department,
    )
    db.add(leave_request)
    await db.flush()
    return leave_request


def next_weekday(start: Optional[date] = None, *, weeks_ahead: int = 1) -> date:
    """The Monday ``weeks_ahead`` weeks after *start* (today by default)."""
    start = start or date.today()
    monday = start + timedelta(days=(7 - start.weekday()) % 7 or 7)
    return monday + timedelta(weeks=weeks_ahead - 1)


@pytest.fixture
async def employee(db) -> Employee:
    return await _seed_employee(db, name="Asha Verma")


@pytest.fixture
async def department_head(db) -> Employee:
    return await _seed_employee(db, name="Ravi Head", role=UserRole.department_head)


@pytest.fixture
async def admin(db) -> Employee:
    return await _seed_employee(
        db, name="Admin", role=UserRole.admin, department=Department.management,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    expired: bool = False,
    token_type: str = "access",
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(employee_id),
        "type": token_type,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(employee: Employee) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(employee.id)}"}
