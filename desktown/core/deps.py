"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator
from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from desktown.core.security import decode_session_token
from desktown.db.session import SessionLocal


# Cookie and header names
COOKIE_NAME = "desktown_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"
EMPLOYEE_TOKEN_HEADER = "X-Employee-Token"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _load_active_user(db: Session, user_id):
    from desktown.db.models import User

    try:
        user_uuid = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
    except ValueError:
        return None
    user = db.query(User).filter(User.id == user_uuid).first()
    if not user or not user.is_active:
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get authenticated user from session cookie.

    Validates:
    - Session cookie exists
    - JWT is valid and not expired
    - User exists and is active
    - Token version matches (for revocation support)

    Raises:
        HTTPException 401: Authentication failed
    """
    from desktown.db.models import User

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid session")

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")

    # Token version check (revocation support)
    if user.token_version != payload.get("token_version"):
        raise HTTPException(status_code=401, detail="Session revoked")

    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db)
):
    """Like get_current_user, but returns None for anonymous callers."""
    if not request.cookies.get(COOKIE_NAME):
        return None
    try:
        return get_current_user(request, db)
    except HTTPException:
        return None


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get session context: user_id, role, email.

    This is the PRIMARY auth dependency for most endpoints.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Unknown role
    """
    from desktown.db.enums import Role
    from desktown.schemas.auth import UserSession

    user = get_current_user(request, db)

    role_value = user.role or Role.MEMBER.value
    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(role_value):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{role_value}'. Contact administrator."
        )

    return UserSession(
        user_id=user.id,
        role=Role(role_value),
        email=user.email,
        display_name=user.display_name,
    )


def require_roles(allowed_roles: list):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.get("/admin", dependencies=[Depends(require_roles(ADMIN_ROLES))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail="Access denied. Insufficient permissions."
            )
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on cookie-authenticated mutations.

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )


def _employee_token_from_request(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return request.headers.get(EMPLOYEE_TOKEN_HEADER) or None


def get_employee_user(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Authenticate an employee-portal request by bearer token.

    Raises:
        HTTPException 401: Missing, expired or revoked token
    """
    from desktown.core.token_store import get_token_store

    token = _employee_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Employee token required")

    user_id = get_token_store().get(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = _load_active_user(db, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def get_employee_token(request: Request) -> str:
    token = _employee_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Employee token required")
    return token
