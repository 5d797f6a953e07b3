"""SQLAlchemy ORM models for users and admin auditing."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, Uuid, func, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from desktown.db.base import Base, utcnow
from desktown.db.enums import PresenceStatus, Role
from desktown.db.types import JSONType


class User(Base):
    """
    Platform account.

    Users are never hard-deleted; `is_active=False` disables login and
    bumping `token_version` revokes every issued session cookie.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str] = mapped_column(
        String(100), default="General", server_default="General", nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(50), default=Role.MEMBER.value, server_default=Role.MEMBER.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=PresenceStatus.OFFLINE.value,
        server_default=PresenceStatus.OFFLINE.value,
        nullable=False,
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(nullable=True)
    token_version: Mapped[int] = mapped_column(
        Integer, default=1, server_default="1", nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true(), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.username or self.email.split("@")[0]


class AdminAuditLog(Base):
    """Admin actions on offices, users and orders."""

    __tablename__ = "admin_audit_logs"
    __table_args__ = (
        Index("idx_admin_audit_created", "created_at"),
        Index("idx_admin_audit_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    admin_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    details: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    admin: Mapped["User"] = relationship()
