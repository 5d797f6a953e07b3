"""
Status service - 24-hour stories.

Rows are kept after they expire; every listing filters on
expires_at > now at query time.
"""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from desktown.db.base import utcnow
from desktown.db.models import Office, Status, StatusLike, StatusReply, StatusView

STATUS_TTL = timedelta(hours=24)


def create_status(db: Session, author_id: UUID, data) -> Status:
    """
    Raises:
        ValueError: unknown office
    """
    if data.office_id is not None and not db.query(Office.id).filter(Office.id == data.office_id).first():
        raise ValueError("Office not found")

    status = Status(
        author_id=author_id,
        office_id=data.office_id,
        media_url=data.media_url,
        media_type=data.media_type,
        caption=data.caption,
        expires_at=utcnow() + STATUS_TTL,
    )
    db.add(status)
    db.commit()
    db.refresh(status)
    return status


def list_active(db: Session, office_id: int | None = None) -> list[Status]:
    query = db.query(Status).options(selectinload(Status.author)).filter(
        Status.expires_at > utcnow()
    )
    if office_id is not None:
        query = query.filter(Status.office_id == office_id)
    return query.order_by(Status.created_at.desc(), Status.id.desc()).all()


def get_status(db: Session, status_id: int, active_only: bool = False) -> Status | None:
    query = db.query(Status).filter(Status.id == status_id)
    if active_only:
        query = query.filter(Status.expires_at > utcnow())
    return query.first()


def delete_status(db: Session, status: Status) -> None:
    db.delete(status)
    db.commit()


def office_names(db: Session, office_ids: set[int]) -> dict[int, str]:
    if not office_ids:
        return {}
    rows = db.query(Office.id, Office.name).filter(Office.id.in_(office_ids)).all()
    return {office_id: name for office_id, name in rows}


def _grouped_counts(db: Session, model, status_ids: list[int]) -> dict[int, int]:
    if not status_ids:
        return {}
    rows = db.query(model.status_id, func.count(model.id)).filter(
        model.status_id.in_(status_ids)
    ).group_by(model.status_id).all()
    return {status_id: count for status_id, count in rows}


def reply_counts(db: Session, status_ids: list[int]) -> dict[int, int]:
    return _grouped_counts(db, StatusReply, status_ids)


def like_counts(db: Session, status_ids: list[int]) -> dict[int, int]:
    return _grouped_counts(db, StatusLike, status_ids)


# =============================================================================
# Views
# =============================================================================


def record_view(db: Session, status: Status, viewer_id: UUID) -> bool:
    """Record a unique view by a non-author. Returns True if it was new."""
    if status.author_id == viewer_id:
        return False
    if db.query(StatusView.id).filter(
        StatusView.status_id == status.id,
        StatusView.viewer_id == viewer_id,
    ).first():
        return False

    db.add(StatusView(status_id=status.id, viewer_id=viewer_id))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        return False
    db.query(Status).filter(Status.id == status.id).update(
        {Status.view_count: Status.view_count + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(status)
    return True


def list_views(db: Session, status_id: int) -> list[StatusView]:
    return db.query(StatusView).options(selectinload(StatusView.viewer)).filter(
        StatusView.status_id == status_id
    ).order_by(StatusView.viewed_at.desc(), StatusView.id.desc()).all()


# =============================================================================
# Likes
# =============================================================================


def is_liked(db: Session, status_id: int, user_id: UUID) -> bool:
    return db.query(StatusLike.id).filter(
        StatusLike.status_id == status_id,
        StatusLike.user_id == user_id,
    ).first() is not None


def like_status(db: Session, status: Status, user_id: UUID) -> None:
    """
    Raises:
        ValueError: already liked
    """
    if is_liked(db, status.id, user_id):
        raise ValueError("Already liked")
    db.add(StatusLike(status_id=status.id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Already liked")


def unlike_status(db: Session, status: Status, user_id: UUID) -> None:
    """
    Raises:
        LookupError: not liked
    """
    deleted = db.query(StatusLike).filter(
        StatusLike.status_id == status.id,
        StatusLike.user_id == user_id,
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise LookupError("Like not found")
    db.commit()


# =============================================================================
# Replies
# =============================================================================


def list_replies(db: Session, status_id: int) -> list[StatusReply]:
    return db.query(StatusReply).options(selectinload(StatusReply.sender)).filter(
        StatusReply.status_id == status_id
    ).order_by(StatusReply.created_at.asc(), StatusReply.id.asc()).all()


def add_reply(db: Session, status: Status, sender_id: UUID, message: str) -> StatusReply:
    reply = StatusReply(status_id=status.id, sender_id=sender_id, message=message.strip())
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return reply
