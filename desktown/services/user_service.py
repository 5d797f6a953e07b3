"""User service - directory listing and profile/role updates."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.models import User


def get_user(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def list_users(db: Session, active_only: bool = False) -> list[User]:
    query = db.query(User)
    if active_only:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.created_at.asc(), User.email.asc()).all()


def list_team(db: Session, exclude_user_id: UUID) -> list[User]:
    """Active users other than the caller."""
    return db.query(User).filter(
        User.is_active.is_(True),
        User.id != exclude_user_id,
    ).order_by(User.first_name.asc(), User.email.asc()).all()


def update_status(db: Session, user: User, status: str) -> User:
    user.status = status
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user: User, updates: dict) -> tuple[User, dict]:
    """
    Apply admin edits (role, department, status).

    Returns the user and a dict of {field: [old, new]} for the audit trail.
    Changing the role bumps token_version so stale cookies stop working.
    """
    changes: dict = {}
    for field, value in updates.items():
        if value is None:
            continue
        value = getattr(value, "value", value)
        old = getattr(user, field)
        if old != value:
            changes[field] = [old, value]
            setattr(user, field, value)
    if "role" in changes:
        user.token_version += 1
    db.commit()
    db.refresh(user)
    return user, changes
