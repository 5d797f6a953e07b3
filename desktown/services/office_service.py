"""
Office service - virtual offices, their department/section hierarchy,
storefront media and posts, visitor chat and followers.

Deleting an office relies on ON DELETE CASCADE for every child table.
"""

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from desktown.db.base import utcnow
from desktown.db.enums import ADMIN_ROLES, ApprovalStatus, MessageSenderType
from desktown.db.models import (
    CompanyDepartment,
    CompanySection,
    Office,
    OfficeFollower,
    OfficeMedia,
    OfficeMessage,
    OfficePost,
    User,
)
from desktown.utils.slug import slugify


# =============================================================================
# Access
# =============================================================================


def can_manage(office: Office, user_id: UUID, role) -> bool:
    """Owner or platform admin."""
    return office.owner_id == user_id or role in ADMIN_ROLES


def can_staff(office: Office, user_id: UUID, role) -> bool:
    """Owner, receptionist or platform admin (visitor chat, video calls)."""
    return can_manage(office, user_id, role) or office.receptionist_id == user_id


# =============================================================================
# Offices
# =============================================================================


def get_office(db: Session, office_id: int) -> Office | None:
    return db.query(Office).filter(Office.id == office_id).first()


def get_office_by_slug(db: Session, slug: str) -> Office | None:
    return db.query(Office).filter(Office.slug == slug).first()


def get_published_office(db: Session, office_id: int) -> Office | None:
    return db.query(Office).filter(
        Office.id == office_id,
        Office.is_published.is_(True),
    ).first()


def list_offices(db: Session, owner_id: UUID | None = None, include_staffed: bool = True) -> list[Office]:
    """All offices, or those owned (or staffed) by one user."""
    query = db.query(Office)
    if owner_id is not None:
        if include_staffed:
            query = query.filter(or_(Office.owner_id == owner_id, Office.receptionist_id == owner_id))
        else:
            query = query.filter(Office.owner_id == owner_id)
    return query.order_by(Office.created_at.desc(), Office.id.desc()).all()


def list_published_offices(db: Session, category: str | None = None) -> list[Office]:
    query = db.query(Office).filter(Office.is_published.is_(True))
    if category:
        query = query.filter(Office.category == category)
    return query.order_by(Office.name.asc(), Office.id.asc()).all()


def list_offices_by_approval(db: Session, approval_status: str) -> list[Office]:
    return db.query(Office).filter(
        Office.approval_status == approval_status
    ).order_by(Office.created_at.asc(), Office.id.asc()).all()


def _check_user_exists(db: Session, user_id: UUID | None, label: str) -> None:
    if user_id and not db.query(User.id).filter(User.id == user_id).first():
        raise ValueError(f"{label} not found")


def create_office(db: Session, owner_id: UUID, data) -> Office:
    """
    New offices start pending approval and unpublished.

    Raises:
        ValueError: slug empty or taken, unknown receptionist
    """
    slug = slugify(data.slug or data.name)
    if not slug:
        raise ValueError("Office slug cannot be empty")
    if get_office_by_slug(db, slug):
        raise ValueError("Office with this URL slug already exists")
    _check_user_exists(db, data.receptionist_id, "Receptionist")

    values = data.model_dump(exclude={"slug"})
    office = Office(
        **values,
        slug=slug,
        owner_id=owner_id,
        approval_status=ApprovalStatus.PENDING.value,
        is_published=False,
    )
    db.add(office)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Office with this URL slug already exists")
    db.refresh(office)
    return office


def update_office(db: Session, office: Office, updates: dict) -> Office:
    """
    Raises:
        ValueError: publishing before approval, unknown receptionist
    """
    if updates.get("is_published") and office.approval_status != ApprovalStatus.APPROVED.value:
        raise ValueError("Office must be approved before it can be published")
    if "receptionist_id" in updates:
        _check_user_exists(db, updates["receptionist_id"], "Receptionist")

    for field, value in updates.items():
        if value is None and field in ("name", "category", "is_published"):
            continue
        setattr(office, field, value)
    db.commit()
    db.refresh(office)
    return office


def delete_office(db: Session, office: Office) -> None:
    db.delete(office)
    db.commit()


def set_approval(db: Session, office: Office, approved: bool) -> Office:
    """Approve (and publish) or reject (and unpublish). The caller commits."""
    if approved:
        office.approval_status = ApprovalStatus.APPROVED.value
        office.is_published = True
    else:
        office.approval_status = ApprovalStatus.REJECTED.value
        office.is_published = False
    return office


# =============================================================================
# Departments / sections
# =============================================================================


def list_departments(db: Session, office_id: int) -> list[CompanyDepartment]:
    return db.query(CompanyDepartment).options(
        selectinload(CompanyDepartment.sections)
    ).filter(
        CompanyDepartment.office_id == office_id
    ).order_by(CompanyDepartment.sort_order.asc(), CompanyDepartment.id.asc()).all()


def get_department(db: Session, department_id: int, office_id: int | None = None) -> CompanyDepartment | None:
    query = db.query(CompanyDepartment).filter(CompanyDepartment.id == department_id)
    if office_id is not None:
        query = query.filter(CompanyDepartment.office_id == office_id)
    return query.first()


def create_department(db: Session, office_id: int, data) -> CompanyDepartment:
    _check_user_exists(db, data.manager_id, "Manager")
    department = CompanyDepartment(office_id=office_id, **data.model_dump())
    db.add(department)
    db.commit()
    db.refresh(department)
    return department


def _apply(db: Session, row, updates: dict, required: tuple[str, ...]):
    for field, value in updates.items():
        if value is None and field in required:
            continue
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row


def update_department(db: Session, department: CompanyDepartment, updates: dict) -> CompanyDepartment:
    if "manager_id" in updates:
        _check_user_exists(db, updates["manager_id"], "Manager")
    return _apply(db, department, updates, ("name", "sort_order", "is_active"))


def delete_department(db: Session, department: CompanyDepartment) -> None:
    db.delete(department)
    db.commit()


def list_sections(db: Session, department_id: int) -> list[CompanySection]:
    return db.query(CompanySection).filter(
        CompanySection.department_id == department_id
    ).order_by(CompanySection.sort_order.asc(), CompanySection.id.asc()).all()


def get_section(db: Session, section_id: int) -> CompanySection | None:
    return db.query(CompanySection).filter(CompanySection.id == section_id).first()


def create_section(db: Session, department_id: int, data) -> CompanySection:
    _check_user_exists(db, data.head_id, "Section head")
    section = CompanySection(department_id=department_id, **data.model_dump())
    db.add(section)
    db.commit()
    db.refresh(section)
    return section


def update_section(db: Session, section: CompanySection, updates: dict) -> CompanySection:
    if "head_id" in updates:
        _check_user_exists(db, updates["head_id"], "Section head")
    return _apply(db, section, updates, ("name", "sort_order", "is_active"))


def delete_section(db: Session, section: CompanySection) -> None:
    db.delete(section)
    db.commit()


# =============================================================================
# Media / posts
# =============================================================================


def list_media(db: Session, office_id: int, include_expired: bool = False) -> list[OfficeMedia]:
    """Pinned first, then newest."""
    query = db.query(OfficeMedia).filter(OfficeMedia.office_id == office_id)
    if not include_expired:
        query = query.filter(
            or_(OfficeMedia.expires_at.is_(None), OfficeMedia.expires_at > utcnow())
        )
    return query.order_by(
        OfficeMedia.is_pinned.desc(), OfficeMedia.created_at.desc(), OfficeMedia.id.desc()
    ).all()


def get_media(db: Session, media_id: int, office_id: int | None = None) -> OfficeMedia | None:
    query = db.query(OfficeMedia).filter(OfficeMedia.id == media_id)
    if office_id is not None:
        query = query.filter(OfficeMedia.office_id == office_id)
    return query.first()


def create_media(db: Session, office_id: int, data) -> OfficeMedia:
    values = data.model_dump()
    values["type"] = data.type.value
    media = OfficeMedia(office_id=office_id, **values)
    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def increment_media_views(db: Session, media: OfficeMedia) -> int:
    db.query(OfficeMedia).filter(OfficeMedia.id == media.id).update(
        {OfficeMedia.views: OfficeMedia.views + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(media)
    return media.views


def list_office_posts(db: Session, office_id: int) -> list[OfficePost]:
    return db.query(OfficePost).filter(
        OfficePost.office_id == office_id
    ).order_by(OfficePost.created_at.desc(), OfficePost.id.desc()).all()


def get_office_post(db: Session, post_id: int, office_id: int | None = None) -> OfficePost | None:
    query = db.query(OfficePost).filter(OfficePost.id == post_id)
    if office_id is not None:
        query = query.filter(OfficePost.office_id == office_id)
    return query.first()


def create_office_post(db: Session, office_id: int, author_id: UUID, data) -> OfficePost:
    post = OfficePost(office_id=office_id, author_id=author_id, **data.model_dump())
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def like_office_post(db: Session, post: OfficePost) -> int:
    """Anonymous counter, no per-user dedupe."""
    db.query(OfficePost).filter(OfficePost.id == post.id).update(
        {OfficePost.likes: OfficePost.likes + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(post)
    return post.likes


def delete_row(db: Session, row) -> None:
    db.delete(row)
    db.commit()


# =============================================================================
# Visitor chat
# =============================================================================


def list_messages(db: Session, office_id: int, session_id: str | None = None) -> list[OfficeMessage]:
    query = db.query(OfficeMessage).filter(OfficeMessage.office_id == office_id)
    if session_id:
        query = query.filter(OfficeMessage.session_id == session_id)
    return query.order_by(OfficeMessage.created_at.asc(), OfficeMessage.id.asc()).all()


def create_visitor_message(db: Session, office_id: int, data) -> OfficeMessage:
    message = OfficeMessage(
        office_id=office_id,
        session_id=data.session_id,
        sender_type=MessageSenderType.VISITOR.value,
        sender_name=data.sender_name,
        sender_email=data.sender_email,
        content=data.content.strip(),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def create_receptionist_message(db: Session, office_id: int, sender: User, data) -> OfficeMessage:
    """Reply to a visitor; the visitor's messages in that session become read."""
    message = OfficeMessage(
        office_id=office_id,
        session_id=data.session_id,
        sender_type=MessageSenderType.RECEPTIONIST.value,
        sender_id=sender.id,
        sender_name=sender.display_name,
        content=data.content.strip(),
    )
    db.add(message)
    mark_visitor_messages_read(db, office_id, data.session_id, commit=False)
    db.commit()
    db.refresh(message)
    return message


def mark_visitor_messages_read(
    db: Session,
    office_id: int,
    session_id: str | None = None,
    commit: bool = True,
) -> int:
    query = db.query(OfficeMessage).filter(
        OfficeMessage.office_id == office_id,
        OfficeMessage.sender_type == MessageSenderType.VISITOR.value,
        OfficeMessage.is_read.is_(False),
    )
    if session_id:
        query = query.filter(OfficeMessage.session_id == session_id)
    count = query.update({OfficeMessage.is_read: True}, synchronize_session=False)
    if commit:
        db.commit()
    return count


def unread_visitor_message_count(db: Session, office_id: int) -> int:
    return db.query(OfficeMessage).filter(
        OfficeMessage.office_id == office_id,
        OfficeMessage.sender_type == MessageSenderType.VISITOR.value,
        OfficeMessage.is_read.is_(False),
    ).count()


# =============================================================================
# Followers
# =============================================================================


def follower_count(db: Session, office_id: int) -> int:
    return db.query(OfficeFollower).filter(OfficeFollower.office_id == office_id).count()


def is_following(db: Session, office_id: int, user_id: UUID) -> bool:
    return db.query(OfficeFollower.id).filter(
        OfficeFollower.office_id == office_id,
        OfficeFollower.follower_id == user_id,
    ).first() is not None


def follow(db: Session, office_id: int, user_id: UUID) -> None:
    """
    Raises:
        ValueError: already following
    """
    if is_following(db, office_id, user_id):
        raise ValueError("Already following this office")
    db.add(OfficeFollower(office_id=office_id, follower_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Already following this office")


def unfollow(db: Session, office_id: int, user_id: UUID) -> None:
    """
    Raises:
        ValueError: not following
    """
    deleted = db.query(OfficeFollower).filter(
        OfficeFollower.office_id == office_id,
        OfficeFollower.follower_id == user_id,
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise ValueError("Not following this office")
    db.commit()
