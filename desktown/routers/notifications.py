"""
Notifications Router - in-app notifications and Web Push subscriptions.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.schemas.auth import UserSession
from desktown.schemas.notification import (
    NotificationRead,
    PushSubscribeRequest,
    PushUnsubscribeRequest,
    UnreadCountResponse,
    VapidKeyResponse,
)
from desktown.services import notification_service, push_service

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Newest first."""
    return notification_service.list_notifications(
        db, session.user_id, unread_only=unread_only, limit=limit, offset=offset
    )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(count=notification_service.get_unread_count(db, session.user_id))


@router.patch(
    "/notifications/{notification_id}/read",
    response_model=NotificationRead,
    dependencies=[Depends(require_csrf_header)],
)
def mark_notification_read(
    notification_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    notification = notification_service.mark_read(db, notification_id, session.user_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.post("/notifications/read-all", dependencies=[Depends(require_csrf_header)])
def mark_all_read(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    count = notification_service.mark_all_read(db, session.user_id)
    return {"marked_read": count}


# =============================================================================
# Web Push
# =============================================================================


@router.get("/push/vapid-public-key", response_model=VapidKeyResponse)
def get_vapid_public_key():
    if not settings.push_enabled:
        raise HTTPException(status_code=503, detail="Push notifications are not configured")
    return VapidKeyResponse(public_key=settings.VAPID_PUBLIC_KEY)


@router.post("/push/subscribe", status_code=201, dependencies=[Depends(require_csrf_header)])
def subscribe(
    data: PushSubscribeRequest,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    sub = push_service.upsert_subscription(
        db,
        user_id=session.user_id,
        endpoint=data.endpoint,
        p256dh=data.keys.p256dh,
        auth=data.keys.auth,
        user_agent=(request.headers.get("user-agent") or "")[:500] or None,
    )
    return {"id": sub.id, "endpoint": sub.endpoint}


@router.post("/push/unsubscribe", dependencies=[Depends(require_csrf_header)])
def unsubscribe(
    data: PushUnsubscribeRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    removed = push_service.remove_subscription(db, session.user_id, data.endpoint)
    return {"removed": removed}
