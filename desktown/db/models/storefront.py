"""SQLAlchemy ORM models for office services, feedback, requests and orders."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from desktown.db.base import Base, utcnow
from desktown.db.enums import OrderStatus, ServiceCommentStatus, ServiceRequestStatus
from desktown.db.types import JSONType

if TYPE_CHECKING:
    from desktown.db.models import Office

_CHILD = dict(cascade="all, delete-orphan", passive_deletes=True)


class OfficeService(Base):
    """
    Sellable service offered by an office.

    Prices are integers in the smallest currency unit. The share_token
    backs the public purchase link.
    """

    __tablename__ = "office_services"
    __table_args__ = (
        Index("idx_office_services_office", "office_id", "sort_order"),
        Index("idx_office_services_owner", "owner_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    office_id: Mapped[int] = mapped_column(
        ForeignKey("offices.id", ondelete="CASCADE"), nullable=False
    )
    owner_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_ar: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SAR", server_default="SAR")
    price_type: Mapped[str] = mapped_column(String(20), default="fixed", server_default="fixed")
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    share_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    office: Mapped["Office"] = relationship(back_populates="services")
    ratings: Mapped[list["ServiceRating"]] = relationship(**_CHILD)
    comments: Mapped[list["ServiceComment"]] = relationship(**_CHILD)
    requests: Mapped[list["ServiceRequest"]] = relationship(**_CHILD)
    orders: Mapped[list["ServiceOrder"]] = relationship(back_populates="service", **_CHILD)


class ServiceRating(Base):
    __tablename__ = "service_ratings"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_service_ratings_range"),
        Index("idx_service_ratings_service", "service_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("office_services.id", ondelete="CASCADE"), nullable=False
    )
    visitor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


class ServiceComment(Base):
    __tablename__ = "service_comments"
    __table_args__ = (Index("idx_service_comments_service", "service_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("office_services.id", ondelete="CASCADE"), nullable=False
    )
    visitor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    visitor_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=ServiceCommentStatus.PUBLISHED.value,
        server_default=ServiceCommentStatus.PUBLISHED.value,
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("service_comments.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


class ServiceRequest(Base):
    """Visitor inquiry about a service."""

    __tablename__ = "service_requests"
    __table_args__ = (Index("idx_service_requests_office", "office_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("office_services.id", ondelete="CASCADE"), nullable=False
    )
    office_id: Mapped[int] = mapped_column(
        ForeignKey("offices.id", ondelete="CASCADE"), nullable=False
    )
    visitor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    visitor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    visitor_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=ServiceRequestStatus.PENDING.value,
        server_default=ServiceRequestStatus.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )


class ServiceOrder(Base):
    """
    Purchase of a service.

    pending -> awaiting_payment when a checkout session is created,
    awaiting_payment -> paid | payment_failed only from the payment webhook.
    """

    __tablename__ = "service_orders"
    __table_args__ = (
        Index("idx_service_orders_office_status", "office_id", "status"),
        Index("idx_service_orders_checkout_session", "checkout_session_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("office_services.id", ondelete="CASCADE"), nullable=False
    )
    office_id: Mapped[int] = mapped_column(
        ForeignKey("offices.id", ondelete="CASCADE"), nullable=False
    )
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    quoted_price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SAR", server_default="SAR")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(30),
        default=OrderStatus.PENDING.value,
        server_default=OrderStatus.PENDING.value,
        nullable=False,
    )
    checkout_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    invoice_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    chat_thread_id: Mapped[int | None] = mapped_column(
        ForeignKey("chat_threads.id", ondelete="SET NULL"), nullable=True
    )
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    service: Mapped["OfficeService"] = relationship(back_populates="orders")


class PaymentWebhookEvent(Base):
    """
    Processed payment webhook events for deduplication.

    A redelivered event hits the unique provider_event_id and is skipped.
    """

    __tablename__ = "payment_webhook_events"
    __table_args__ = (
        Index("ix_payment_webhook_events_order_id", "order_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    provider_event_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    order_id: Mapped[int | None] = mapped_column(
        ForeignKey("service_orders.id", ondelete="SET NULL"), nullable=True
    )
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
