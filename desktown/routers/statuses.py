"""Statuses router - 24-hour stories."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.schemas.auth import UserSession
from desktown.schemas.status import (
    StatusCreate,
    StatusDetail,
    StatusLikeResponse,
    StatusRead,
    StatusReplyCreate,
    StatusReplyRead,
    StatusViewRead,
)
from desktown.services import office_service, status_service

router = APIRouter()


def _status_fields(status, office_name: str | None, replies: int, likes: int) -> dict:
    author = status.author
    return dict(
        id=status.id,
        author_id=status.author_id,
        author_name=author.display_name if author else "",
        author_image_url=author.profile_image_url if author else None,
        office_id=status.office_id,
        office_name=office_name,
        media_url=status.media_url,
        media_type=status.media_type,
        caption=status.caption,
        expires_at=status.expires_at,
        view_count=status.view_count,
        reply_count=replies,
        like_count=likes,
        created_at=status.created_at,
    )


def _active_status_or_404(db: Session, status_id: int):
    status = status_service.get_status(db, status_id, active_only=True)
    if not status:
        raise HTTPException(status_code=404, detail="Status not found")
    return status


def _own_status_or_404(db: Session, status_id: int, session: UserSession):
    status = status_service.get_status(db, status_id)
    if not status:
        raise HTTPException(status_code=404, detail="Status not found")
    if status.author_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the author can do this")
    return status


def _reply_to_read(reply) -> StatusReplyRead:
    return StatusReplyRead(
        id=reply.id,
        status_id=reply.status_id,
        sender_id=reply.sender_id,
        sender_name=reply.sender.display_name if reply.sender else None,
        message=reply.message,
        is_read=reply.is_read,
        created_at=reply.created_at,
    )


def _like_state(db: Session, status_id: int, session: UserSession) -> StatusLikeResponse:
    return StatusLikeResponse(
        is_liked=status_service.is_liked(db, status_id, session.user_id),
        like_count=status_service.like_counts(db, [status_id]).get(status_id, 0),
    )


@router.get("/statuses", response_model=list[StatusRead])
def list_statuses(
    office_id: int | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Unexpired statuses, newest first."""
    statuses = status_service.list_active(db, office_id)
    ids = [s.id for s in statuses]
    replies = status_service.reply_counts(db, ids)
    likes = status_service.like_counts(db, ids)
    offices = status_service.office_names(db, {s.office_id for s in statuses if s.office_id})
    return [
        StatusRead(**_status_fields(s, offices.get(s.office_id), replies.get(s.id, 0), likes.get(s.id, 0)))
        for s in statuses
    ]


@router.post(
    "/statuses",
    response_model=StatusRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_status(
    data: StatusCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        status = status_service.create_status(db, session.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    offices = status_service.office_names(db, {status.office_id} if status.office_id else set())
    return StatusRead(**_status_fields(status, offices.get(status.office_id), 0, 0))


@router.get("/statuses/{status_id}", response_model=StatusDetail)
def get_status(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Viewing records a unique view for anyone but the author."""
    status = _active_status_or_404(db, status_id)
    status_service.record_view(db, status, session.user_id)

    office_name = None
    following = False
    if status.office_id:
        office_name = status_service.office_names(db, {status.office_id}).get(status.office_id)
        following = office_service.is_following(db, status.office_id, session.user_id)

    return StatusDetail(
        **_status_fields(
            status,
            office_name,
            status_service.reply_counts(db, [status.id]).get(status.id, 0),
            status_service.like_counts(db, [status.id]).get(status.id, 0),
        ),
        is_liked=status_service.is_liked(db, status.id, session.user_id),
        is_following_office=following,
    )


@router.delete("/statuses/{status_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_status(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    status = _own_status_or_404(db, status_id, session)
    status_service.delete_status(db, status)
    return Response(status_code=204)


@router.get("/statuses/{status_id}/replies", response_model=list[StatusReplyRead])
def list_replies(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """The author sees every reply; everyone else only their own."""
    status = status_service.get_status(db, status_id)
    if not status:
        raise HTTPException(status_code=404, detail="Status not found")
    replies = status_service.list_replies(db, status_id)
    if status.author_id != session.user_id:
        replies = [r for r in replies if r.sender_id == session.user_id]
    return [_reply_to_read(r) for r in replies]


@router.post(
    "/statuses/{status_id}/replies",
    response_model=StatusReplyRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def reply_to_status(
    status_id: int,
    data: StatusReplyCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    status = _active_status_or_404(db, status_id)
    return _reply_to_read(status_service.add_reply(db, status, session.user_id, data.message))


@router.post(
    "/statuses/{status_id}/like",
    response_model=StatusLikeResponse,
    dependencies=[Depends(require_csrf_header)],
)
def like_status(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    status = _active_status_or_404(db, status_id)
    try:
        status_service.like_status(db, status, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _like_state(db, status_id, session)


@router.delete(
    "/statuses/{status_id}/like",
    response_model=StatusLikeResponse,
    dependencies=[Depends(require_csrf_header)],
)
def unlike_status(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    status = status_service.get_status(db, status_id)
    if not status:
        raise HTTPException(status_code=404, detail="Status not found")
    try:
        status_service.unlike_status(db, status, session.user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _like_state(db, status_id, session)


@router.get("/statuses/{status_id}/views", response_model=list[StatusViewRead])
def list_views(
    status_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _own_status_or_404(db, status_id, session)
    return [
        StatusViewRead(
            viewer_id=v.viewer_id,
            viewer_name=v.viewer.display_name if v.viewer else None,
            viewed_at=v.viewed_at,
        )
        for v in status_service.list_views(db, status_id)
    ]
