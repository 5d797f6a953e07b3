"""
Storefront service - sellable office services and their public feedback.

Services are owned by the office owner. Each gets a unique slug and a
32-hex share_token that backs the public purchase link.
"""

import secrets
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.enums import ServiceCommentStatus
from desktown.db.models import (
    Office,
    OfficeService,
    ServiceComment,
    ServiceRating,
    ServiceRequest,
)
from desktown.utils.slug import slug_with_suffix


def generate_share_token() -> str:
    return secrets.token_hex(16)


# =============================================================================
# Services
# =============================================================================


def get_service(db: Session, service_id: int, office_id: int | None = None) -> OfficeService | None:
    query = db.query(OfficeService).filter(OfficeService.id == service_id)
    if office_id is not None:
        query = query.filter(OfficeService.office_id == office_id)
    return query.first()


def get_service_by_token(db: Session, token: str) -> OfficeService | None:
    """Active service behind a share link."""
    return db.query(OfficeService).filter(
        OfficeService.share_token == token,
        OfficeService.is_active.is_(True),
    ).first()


def list_services_by_owner(db: Session, owner_id: UUID) -> list[OfficeService]:
    return db.query(OfficeService).filter(
        OfficeService.owner_user_id == owner_id
    ).order_by(OfficeService.created_at.desc(), OfficeService.id.desc()).all()


def list_office_services(db: Session, office_id: int, active_only: bool = False) -> list[OfficeService]:
    query = db.query(OfficeService).filter(OfficeService.office_id == office_id)
    if active_only:
        query = query.filter(OfficeService.is_active.is_(True))
    return query.order_by(OfficeService.sort_order.asc(), OfficeService.id.asc()).all()


def list_paid_services(db: Session) -> list[OfficeService]:
    """Active services of published offices."""
    return db.query(OfficeService).join(
        Office, Office.id == OfficeService.office_id
    ).filter(
        OfficeService.is_active.is_(True),
        Office.is_published.is_(True),
    ).order_by(
        OfficeService.is_featured.desc(), OfficeService.created_at.desc(), OfficeService.id.desc()
    ).all()


def create_service(db: Session, office: Office, owner_id: UUID, data) -> OfficeService:
    """
    Create a service under an office.

    Raises:
        ValueError: slug/token collision survived a retry
    """
    values = data.model_dump(exclude={"office_id"})
    for _ in range(2):
        service = OfficeService(
            **values,
            office_id=office.id,
            owner_user_id=owner_id,
            slug=slug_with_suffix(data.name),
            share_token=generate_share_token(),
        )
        db.add(service)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            continue
        db.refresh(service)
        return service
    raise ValueError("Could not allocate a unique service link, try again")


def update_service(db: Session, service: OfficeService, updates: dict) -> OfficeService:
    for field, value in updates.items():
        if value is None and field in ("name", "price", "currency", "price_type", "is_featured", "is_active", "sort_order"):
            continue
        setattr(service, field, value)
    db.commit()
    db.refresh(service)
    return service


def delete_service(db: Session, service: OfficeService) -> None:
    db.delete(service)
    db.commit()


def share_link(service: OfficeService) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/service/{service.share_token}"


# =============================================================================
# Ratings
# =============================================================================


def rating_stats(db: Session, service_ids: list[int]) -> dict[int, tuple[float | None, int]]:
    """service_id -> (average rounded to 2 places, count), one grouped query."""
    if not service_ids:
        return {}
    rows = db.query(
        ServiceRating.service_id,
        func.avg(ServiceRating.rating),
        func.count(ServiceRating.id),
    ).filter(
        ServiceRating.service_id.in_(service_ids)
    ).group_by(ServiceRating.service_id).all()

    stats = {sid: (None, 0) for sid in service_ids}
    for service_id, avg, count in rows:
        stats[service_id] = (round(float(avg), 2) if avg is not None else None, count)
    return stats


def list_ratings(db: Session, service_id: int) -> list[ServiceRating]:
    return db.query(ServiceRating).filter(
        ServiceRating.service_id == service_id
    ).order_by(ServiceRating.created_at.desc(), ServiceRating.id.desc()).all()


def add_rating(
    db: Session,
    service_id: int,
    rating: int,
    visitor_name: str | None = None,
    user_id: UUID | None = None,
) -> ServiceRating:
    row = ServiceRating(
        service_id=service_id,
        rating=rating,
        visitor_name=visitor_name,
        user_id=user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# =============================================================================
# Comments
# =============================================================================


def list_comments(db: Session, service_id: int) -> list[ServiceComment]:
    """Published comments, oldest first."""
    return db.query(ServiceComment).filter(
        ServiceComment.service_id == service_id,
        ServiceComment.status == ServiceCommentStatus.PUBLISHED.value,
    ).order_by(ServiceComment.created_at.asc(), ServiceComment.id.asc()).all()


def add_comment(db: Session, service_id: int, data, user_id: UUID | None = None) -> ServiceComment:
    """
    Raises:
        ValueError: parent comment belongs to another service
    """
    if data.parent_id is not None:
        parent = db.query(ServiceComment).filter(ServiceComment.id == data.parent_id).first()
        if not parent or parent.service_id != service_id:
            raise ValueError("Parent comment not found")

    comment = ServiceComment(
        service_id=service_id,
        user_id=user_id,
        content=data.content,
        visitor_name=data.visitor_name,
        visitor_email=data.visitor_email,
        rating=data.rating,
        parent_id=data.parent_id,
        status=ServiceCommentStatus.PUBLISHED.value,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


# =============================================================================
# Requests
# =============================================================================


def create_request(db: Session, service: OfficeService, data) -> ServiceRequest:
    request_row = ServiceRequest(
        service_id=service.id,
        office_id=service.office_id,
        visitor_name=data.visitor_name,
        visitor_email=data.visitor_email,
        visitor_phone=data.visitor_phone,
        message=data.message,
    )
    db.add(request_row)
    db.commit()
    db.refresh(request_row)
    return request_row
