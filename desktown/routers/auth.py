"""Auth router - cookie session login, registration and presence."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.core.deps import (
    COOKIE_NAME,
    get_current_user,
    get_db,
    get_optional_user,
    require_csrf_header,
)
from desktown.core.rate_limit import AUTH_LIMIT, limiter
from desktown.core.security import create_session_token
from desktown.db.enums import PresenceStatus
from desktown.schemas.auth import LoginRequest, RegisterRequest, UserRead
from desktown.services import auth_service

router = APIRouter()


def _set_session_cookie(response: Response, user) -> None:
    token = create_session_token(user.id, user.role, user.token_version)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRES_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


@router.post("/register", response_model=UserRead, status_code=201)
@limiter.limit(AUTH_LIMIT)
def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create a member account and log it in."""
    try:
        user = auth_service.register_user(
            db,
            email=data.email,
            password=data.password,
            username=data.username,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _set_session_cookie(response, user)
    return user


@router.post("/login", response_model=UserRead)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Email/username + password login. Marks the user online."""
    user = auth_service.authenticate(db, data.identity, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = auth_service.set_presence(db, user, PresenceStatus.ONLINE)
    _set_session_cookie(response, user)
    return user


@router.post("/logout", dependencies=[Depends(require_csrf_header)])
def logout(
    response: Response,
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Mark the caller offline and clear the session cookie."""
    if user:
        auth_service.set_presence(db, user, PresenceStatus.OFFLINE)
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"status": "logged_out"}


@router.get("/auth/user", response_model=UserRead)
def get_me(user=Depends(get_current_user)):
    return user


@router.post(
    "/auth/heartbeat",
    response_model=UserRead,
    dependencies=[Depends(require_csrf_header)],
)
def heartbeat(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Keep-alive from the client: status online, last_seen_at now."""
    return auth_service.set_presence(db, user, PresenceStatus.ONLINE)
