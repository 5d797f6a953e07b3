"""SQLAlchemy ORM model for uploaded objects and their ACL tag."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from desktown.db.base import Base, utcnow
from desktown.db.enums import ObjectVisibility


class StoredObject(Base):
    """
    Uploaded file in object storage.

    visibility=public objects are served to anyone; private objects only
    to their owner and admins.
    """

    __tablename__ = "stored_objects"
    __table_args__ = (Index("idx_stored_objects_owner", "owner_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    object_path: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(20),
        default=ObjectVisibility.PUBLIC.value,
        server_default=ObjectVisibility.PUBLIC.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
