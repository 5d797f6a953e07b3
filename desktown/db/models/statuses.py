"""SQLAlchemy ORM models for 24-hour status stories."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from desktown.db.base import Base, utcnow

if TYPE_CHECKING:
    from desktown.db.models import User

_CHILD = dict(cascade="all, delete-orphan", passive_deletes=True)


class Status(Base):
    """
    Story that disappears from listings after expires_at.

    Rows are never reaped; "active" is evaluated at read time.
    """

    __tablename__ = "statuses"
    __table_args__ = (Index("idx_statuses_expires", "expires_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    office_id: Mapped[int | None] = mapped_column(
        ForeignKey("offices.id", ondelete="CASCADE"), nullable=True
    )
    media_url: Mapped[str] = mapped_column(Text, nullable=False)
    media_type: Mapped[str] = mapped_column(String(20), default="video", server_default="video")
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    author: Mapped["User"] = relationship()
    replies: Mapped[list["StatusReply"]] = relationship(**_CHILD)
    views: Mapped[list["StatusView"]] = relationship(**_CHILD)
    likes: Mapped[list["StatusLike"]] = relationship(**_CHILD)


class StatusReply(Base):
    __tablename__ = "status_replies"
    __table_args__ = (Index("idx_status_replies_status", "status_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_id: Mapped[int] = mapped_column(
        ForeignKey("statuses.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    sender: Mapped["User"] = relationship()


class StatusView(Base):
    __tablename__ = "status_views"
    __table_args__ = (UniqueConstraint("status_id", "viewer_id", name="uq_status_view"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_id: Mapped[int] = mapped_column(
        ForeignKey("statuses.id", ondelete="CASCADE"), nullable=False
    )
    viewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    viewer: Mapped["User"] = relationship()


class StatusLike(Base):
    __tablename__ = "status_likes"
    __table_args__ = (UniqueConstraint("status_id", "user_id", name="uq_status_like"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_id: Mapped[int] = mapped_column(
        ForeignKey("statuses.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
