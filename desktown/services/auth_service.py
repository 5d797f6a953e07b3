"""Auth service - registration, credential checks and presence."""

import logging
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from desktown.core.security import hash_password, verify_password
from desktown.db.base import utcnow
from desktown.db.enums import PresenceStatus, Role
from desktown.db.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def find_user_by_identity(db: Session, identity: str) -> User | None:
    """Look up a user by email or username."""
    identity = identity.strip()
    if not identity:
        return None
    return db.query(User).filter(
        or_(
            func.lower(User.email) == identity.lower(),
            User.username == identity,
        )
    ).first()


def register_user(
    db: Session,
    email: str,
    password: str,
    username: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    role: Role = Role.MEMBER,
) -> User:
    """
    Create a user with a scrypt password hash.

    Raises:
        ValueError: Email or username already taken
    """
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ValueError("Email already registered")
    if username and db.query(User).filter(User.username == username).first():
        raise ValueError("Username already taken")

    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Email or username already taken")
    db.refresh(user)
    return user


def authenticate(db: Session, identity: str, password: str) -> User | None:
    """Return the active user matching the credentials, or None."""
    user = find_user_by_identity(db, identity)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def set_presence(db: Session, user: User, status: PresenceStatus) -> User:
    user.status = status.value
    user.last_seen_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def revoke_sessions(db: Session, user_id: UUID) -> None:
    """Invalidate every issued session cookie for a user."""
    user = db.query(User).filter(User.id == user_id).first()
    if user:
        user.token_version += 1
        db.commit()
