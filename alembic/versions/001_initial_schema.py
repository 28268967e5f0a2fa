"""001 – Initial schema: employees, leave ledger, leave requests, audit trail.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("user_role", ["admin", "department-head", "employee"]),
    (
        "department_name",
        [
            "Computer Science",
            "Information Technology",
            "Electronics",
            "Mechanical",
            "Civil",
            "Management",
            "Human Resources",
        ],
    ),
    ("leave_category", ["cl", "scl", "el", "hpl", "ccl"]),
    ("leave_status", ["pending", "approved", "rejected"]),
    ("half_day_segment", ["first-half", "second-half"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_code    VARCHAR(20)  NOT NULL UNIQUE,
            name             VARCHAR(50)  NOT NULL,
            email            VARCHAR(255) NOT NULL UNIQUE,
            role             user_role NOT NULL DEFAULT 'employee',
            department       department_name NOT NULL,
            date_of_joining  DATE NOT NULL,
            is_active        BOOLEAN NOT NULL DEFAULT TRUE,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX idx_employees_department ON employees(department, role)")

    # ── 2. leave_balances ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_balances (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            category     leave_category NOT NULL,
            balance      INTEGER NOT NULL DEFAULT 0,
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_leave_balance UNIQUE (employee_id, category)
        )
    """)

    # ── 3. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id       UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            category          leave_category NOT NULL,
            from_date         DATE NOT NULL,
            to_date           DATE NOT NULL,
            chargeable_days   INTEGER NOT NULL,
            reason            VARCHAR(500) NOT NULL,
            is_half_day       BOOLEAN NOT NULL DEFAULT FALSE,
            half_day_segment  half_day_segment,
            status            leave_status NOT NULL DEFAULT 'pending',
            rejection_reason  VARCHAR(200),
            approved_by       UUID REFERENCES employees(id) ON DELETE SET NULL,
            approved_at       TIMESTAMPTZ,
            submitted_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            employee_name     VARCHAR(50) NOT NULL,
            employee_code     VARCHAR(20) NOT NULL,
            department        department_name NOT NULL,
            CONSTRAINT ck_leave_date_order CHECK (to_date >= from_date),
            CONSTRAINT ck_leave_chargeable_days CHECK (chargeable_days >= 1),
            CONSTRAINT ck_leave_half_day_segment CHECK (
                (is_half_day AND half_day_segment IS NOT NULL)
                OR (NOT is_half_day AND half_day_segment IS NULL)
            )
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_requests_employee_status "
        "ON leave_requests(employee_id, status)"
    )
    op.execute(
        "CREATE INDEX ix_leave_requests_department_status "
        "ON leave_requests(department, status)"
    )
    op.execute(
        "CREATE INDEX ix_leave_requests_dates "
        "ON leave_requests(from_date, to_date)"
    )

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id    UUID REFERENCES employees(id) ON DELETE SET NULL,
            action      VARCHAR(50) NOT NULL,
            entity_type VARCHAR(50) NOT NULL,
            entity_id   UUID NOT NULL,
            old_values  JSON,
            new_values  JSON,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_audit_trail_entity "
        "ON audit_trail(entity_type, entity_id)"
    )
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for t in ["audit_trail", "leave_requests", "leave_balances", "employees"]:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
