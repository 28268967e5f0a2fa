"""Audit trail model and async helper for recording entity changes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from leave_portal.database import Base


# ── Immutable audit-trail table ─────────────────────────────────────

class AuditTrail(Base):
    """Immutable log of every significant data change."""

    __tablename__ = "audit_trail"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # No FK: cancelled leave requests are deleted but their trail stays.
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    old_values: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    new_values: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_audit_trail_actor_id", "actor_id"),
        Index("ix_audit_trail_entity", "entity_type", "entity_id"),
        Index("ix_audit_trail_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditTrail {self.action} {self.entity_type}"
            f"/{self.entity_id} by {self.actor_id}>"
        )


# ── Helper to create an entry ───────────────────────────────────────

async def create_audit_entry(
    session: AsyncSession,
    *,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID,
    actor_id: Optional[uuid.UUID] = None,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
) -> AuditTrail:
    """
    Create and flush an audit-trail entry.

    Args:
        session: Async SQLAlchemy session.
        action: create | submit | approve | reject | cancel | deactivate | etc.
        entity_type: e.g. "employee", "leave_request".
        entity_id: UUID of the affected entity.
        actor_id: UUID of the user performing the action.
        old_values: Previous state (for updates/deletes).
        new_values: New state (for creates/updates).
    """
    entry = AuditTrail(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
    )
    session.add(entry)
    await session.flush()
    return entry
