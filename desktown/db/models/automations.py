"""SQLAlchemy ORM models for n8n task automations."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, Uuid, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from desktown.db.base import Base, utcnow
from desktown.db.enums import AutomationStatus
from desktown.db.types import JSONType

if TYPE_CHECKING:
    from desktown.db.models import Task


class N8nSettings(Base):
    """Per-user automation endpoint."""

    __tablename__ = "n8n_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    webhook_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Sent as X-API-Key and used to sign callbacks for this user
    api_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )


class TaskAutomation(Base):
    """One hand-off of a task to an n8n workflow and its AI suggestion."""

    __tablename__ = "task_automations"
    __table_args__ = (
        Index("idx_task_automations_user_status", "user_id", "status"),
        Index("idx_task_automations_task", "task_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    ai_suggestion: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_metadata: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=AutomationStatus.PENDING.value,
        server_default=AutomationStatus.PENDING.value,
    )
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    n8n_execution_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    task: Mapped["Task"] = relationship()
