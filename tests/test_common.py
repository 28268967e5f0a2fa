"""Tests for common utilities — pagination and RFC 7807 error bodies."""

from __future__ import annotations

import uuid

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.constants import Department
from leave_portal.common.exceptions import (
    AlreadyProcessed,
    InsufficientBalance,
    NotFoundException,
    OverlapConflict,
    register_exception_handlers,
)
from leave_portal.common.pagination import PaginationParams, paginate
from leave_portal.employees.models import Employee
from leave_portal.employees.repository import EmployeeRepository
from tests.conftest import _seed_employee


def _params(page: int = 1, page_size: int = 10, sort=None) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size, sort=sort)


# ═════════════════════════════════════════════════════════════════════
# PAGINATION TESTS
# ═════════════════════════════════════════════════════════════════════


class TestPagination:

    async def test_paginate_with_sort(self, db: AsyncSession):
        for name in ("Charlie", "Alice", "Bob"):
            await _seed_employee(db, name=name)

        rows, meta = await paginate(
            db, EmployeeRepository.filtered(), _params(sort="name"), model=Employee,
        )

        assert [r.name for r in rows] == ["Alice", "Bob", "Charlie"]
        assert meta.total == 3
        assert meta.total_pages == 1
        assert meta.has_next is False

    async def test_paginate_page_2(self, db: AsyncSession):
        for i in range(5):
            await _seed_employee(db, name=f"Person {i}")

        rows, meta = await paginate(
            db, EmployeeRepository.filtered(), _params(page=2, page_size=2, sort="-name"),
            model=Employee,
        )

        assert [r.name for r in rows] == ["Person 2", "Person 1"]
        assert meta.total == 5
        assert meta.total_pages == 3
        assert meta.has_next is True
        assert meta.has_prev is True

    async def test_count_respects_filters(self, db: AsyncSession):
        await _seed_employee(db)
        await _seed_employee(db, department=Department.civil)

        _, meta = await paginate(
            db, EmployeeRepository.filtered(department=Department.civil), _params(),
            model=Employee,
        )

        assert meta.total == 1

    async def test_unknown_sort_field_ignored(self, db: AsyncSession):
        await _seed_employee(db)

        rows, _ = await paginate(
            db, EmployeeRepository.filtered(), _params(sort="password; drop table"),
            model=Employee,
        )
        assert len(rows) == 1

    async def test_paginate_empty_result(self, db: AsyncSession):
        rows, meta = await paginate(
            db, EmployeeRepository.filtered(), _params(), model=Employee,
        )

        assert rows == []
        assert meta.total == 0
        assert meta.total_pages == 0
        assert meta.has_prev is False


# ═════════════════════════════════════════════════════════════════════
# PROBLEM DETAIL TESTS
# ═════════════════════════════════════════════════════════════════════


def _error_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    conflict_id = uuid.UUID("00000000-0000-0000-0000-000000000042")

    @app.get("/missing")
    async def missing():
        raise NotFoundException("LeaveRequest", "abc")

    @app.get("/overlap")
    async def overlap():
        raise OverlapConflict(conflict_id)

    @app.get("/balance")
    async def balance():
        raise InsufficientBalance("cl", 2, 3, "Jan-Jun")

    @app.get("/processed")
    async def processed():
        raise AlreadyProcessed(conflict_id, status="approved")

    return app


class TestProblemDetails:

    async def _get(self, path: str):
        async with AsyncClient(
            transport=ASGITransport(app=_error_app()), base_url="http://test",
        ) as ac:
            return await ac.get(path)

    async def test_not_found(self):
        resp = await self._get("/missing")

        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["type"] == "https://leave.portal/errors/not-found"
        assert body["instance"] == "/missing"
        assert "abc" in body["detail"]

    async def test_overlap_carries_request_id(self):
        body = (await self._get("/overlap")).json()

        assert body["status"] == 409
        assert body["conflictingRequestId"] == "00000000-0000-0000-0000-000000000042"

    async def test_insufficient_balance_message(self):
        resp = await self._get("/balance")

        assert resp.status_code == 422
        body = resp.json()
        assert body["detail"] == (
            "Insufficient CL balance (Jan-Jun). Available: 2 days, Required: 3 days"
        )
        assert (body["available"], body["requested"]) == (2, 3)
        assert "balance" in body["errors"]

    async def test_already_processed_names_status(self):
        body = (await self._get("/processed")).json()

        assert body["status"] == 409
        assert "approved" in body["detail"]
