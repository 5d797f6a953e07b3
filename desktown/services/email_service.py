"""
Internal email service.

Folders are views over the flags on InternalEmail:
- inbox:    recipient, not draft/archived/deleted
- sent:     sender, not draft/deleted
- drafts:   sender, draft, not deleted
- starred:  either party, starred, not deleted
- archived: recipient, archived, not deleted
"""

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, selectinload

from desktown.db.models import InternalEmail, User

FOLDERS = ("inbox", "sent", "drafts", "starred", "archived")


def _base(db: Session) -> Query:
    return db.query(InternalEmail).options(
        selectinload(InternalEmail.sender),
        selectinload(InternalEmail.recipient),
    )


def _inbox_filter(query: Query, user_id: UUID) -> Query:
    return query.filter(
        InternalEmail.recipient_id == user_id,
        InternalEmail.is_draft.is_(False),
        InternalEmail.is_archived.is_(False),
        InternalEmail.is_deleted.is_(False),
    )


def list_folder(db: Session, user_id: UUID, folder: str, limit: int = 100, offset: int = 0) -> list[InternalEmail]:
    """
    Raises:
        ValueError: unknown folder
    """
    query = _base(db)
    if folder == "inbox":
        query = _inbox_filter(query, user_id)
    elif folder == "sent":
        query = query.filter(
            InternalEmail.sender_id == user_id,
            InternalEmail.is_draft.is_(False),
            InternalEmail.is_deleted.is_(False),
        )
    elif folder == "drafts":
        query = query.filter(
            InternalEmail.sender_id == user_id,
            InternalEmail.is_draft.is_(True),
            InternalEmail.is_deleted.is_(False),
        )
    elif folder == "starred":
        query = query.filter(
            or_(InternalEmail.recipient_id == user_id, InternalEmail.sender_id == user_id),
            InternalEmail.is_starred.is_(True),
            InternalEmail.is_deleted.is_(False),
        )
    elif folder == "archived":
        query = query.filter(
            InternalEmail.recipient_id == user_id,
            InternalEmail.is_archived.is_(True),
            InternalEmail.is_deleted.is_(False),
        )
    else:
        raise ValueError(f"Unknown folder: {folder}")

    return query.order_by(
        InternalEmail.created_at.desc(), InternalEmail.id.desc()
    ).offset(offset).limit(limit).all()


def unread_count(db: Session, user_id: UUID) -> int:
    return _inbox_filter(db.query(InternalEmail), user_id).filter(
        InternalEmail.is_read.is_(False)
    ).count()


def get_email(db: Session, email_id: int) -> InternalEmail | None:
    return _base(db).filter(InternalEmail.id == email_id).first()


def can_view(email: InternalEmail, user_id: UUID) -> bool:
    if email.is_deleted:
        return False
    if email.sender_id == user_id:
        return True
    return email.recipient_id == user_id and not email.is_draft


def send_email(
    db: Session,
    sender_id: UUID,
    recipient_id: UUID,
    subject: str,
    body: str,
    is_draft: bool = False,
    parent_email_id: int | None = None,
) -> InternalEmail:
    """
    Create (and, unless draft, deliver) an email. The caller notifies.

    Raises:
        LookupError: recipient or parent email does not exist
    """
    if not db.query(User.id).filter(User.id == recipient_id).first():
        raise LookupError("Recipient not found")

    if parent_email_id is not None:
        parent = db.query(InternalEmail).filter(InternalEmail.id == parent_email_id).first()
        if not parent or not can_view(parent, sender_id):
            raise LookupError("Parent email not found")

    email = InternalEmail(
        sender_id=sender_id,
        recipient_id=recipient_id,
        subject=subject,
        body=body,
        is_draft=is_draft,
        parent_email_id=parent_email_id,
    )
    db.add(email)
    db.commit()
    db.refresh(email)
    return email


def update_draft(db: Session, email: InternalEmail, updates: dict) -> tuple[InternalEmail, bool]:
    """
    Edit a draft. Returns (email, sent) where sent means it just left drafts.

    Raises:
        ValueError: email is no longer a draft
        LookupError: new recipient does not exist
    """
    if not email.is_draft:
        raise ValueError("Only drafts can be edited")
    recipient_id = updates.get("recipient_id")
    if recipient_id and not db.query(User.id).filter(User.id == recipient_id).first():
        raise LookupError("Recipient not found")

    for field in ("recipient_id", "subject", "body"):
        if updates.get(field) is not None:
            setattr(email, field, updates[field])

    sent = updates.get("is_draft") is False
    if sent:
        email.is_draft = False
    db.commit()
    db.refresh(email)
    return email, sent


def soft_delete(db: Session, email: InternalEmail) -> None:
    email.is_deleted = True
    db.commit()


def toggle_star(db: Session, email: InternalEmail) -> InternalEmail:
    email.is_starred = not email.is_starred
    db.commit()
    db.refresh(email)
    return email


def toggle_archive(db: Session, email: InternalEmail) -> InternalEmail:
    email.is_archived = not email.is_archived
    db.commit()
    db.refresh(email)
    return email


def mark_read(db: Session, email: InternalEmail, is_read: bool = True) -> InternalEmail:
    if email.is_read != is_read:
        email.is_read = is_read
        db.commit()
        db.refresh(email)
    return email
