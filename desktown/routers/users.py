"""Users router - directory, self status and admin edits."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from desktown.core.deps import (
    get_current_session,
    get_db,
    require_csrf_header,
    require_roles,
)
from desktown.db.enums import ADMIN_ROLES
from desktown.schemas.auth import UserAdminUpdate, UserRead, UserSession, UserStatusUpdate
from desktown.services import audit_service, user_service

router = APIRouter()


@router.get("/users", response_model=list[UserRead])
def list_users(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return user_service.list_users(db)


@router.patch(
    "/users/{user_id}/status",
    response_model=UserRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_my_status(
    user_id: UUID,
    data: UserStatusUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Presence update. Users can only change their own status."""
    if user_id != session.user_id:
        raise HTTPException(status_code=403, detail="Cannot change another user's status")
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user_service.update_status(db, user, data.status.value)


@router.patch(
    "/users/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_csrf_header)],
)
def admin_update_user(
    user_id: UUID,
    data: UserAdminUpdate,
    request: Request,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """Change role, department or status (admin only)."""
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user, changes = user_service.update_user(db, user, data.model_dump(exclude_unset=True))
    if changes:
        audit_service.log_admin_action(
            db,
            admin_id=session.user_id,
            action="user_updated",
            entity_type="user",
            entity_id=user.id,
            details={"changes": changes},
            request=request,
        )
        db.commit()
    return user
