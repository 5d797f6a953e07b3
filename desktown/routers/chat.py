"""Chat router - threads, participants, messages and read markers."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.routers.chat_shared import (
    _message_to_read,
    _participant_to_read,
    thread_for_user,
    threads_for_user,
)
from desktown.schemas.auth import UserSession
from desktown.schemas.chat import (
    DirectThreadCreate,
    MarkReadResponse,
    MessageCreate,
    MessageRead,
    ParticipantAdd,
    ParticipantRead,
    ThreadCreate,
    ThreadRead,
    ThreadUpdate,
)
from desktown.services import chat_service

router = APIRouter()


def _require_membership(db: Session, thread_id: int, user_id: UUID):
    """Return (thread, participant) or raise 404/403."""
    thread = chat_service.get_thread(db, thread_id)
    if not thread:
        raise HTTPException(status_code=404, detail="Thread not found")
    participant = chat_service.get_participant(db, thread_id, user_id)
    if not participant:
        raise HTTPException(status_code=403, detail="Not a participant of this thread")
    return thread, participant


def _require_manager(thread, participant, user_id: UUID) -> None:
    if not chat_service.can_manage_thread(thread, participant, user_id):
        raise HTTPException(status_code=403, detail="Only thread admins can do this")


# =============================================================================
# Threads
# =============================================================================


@router.get("/threads", response_model=list[ThreadRead])
def list_threads(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Caller's threads with unread_count, last_message and participants."""
    return threads_for_user(db, session.user_id)


@router.post(
    "/threads",
    response_model=ThreadRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_thread(
    data: ThreadCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        thread = chat_service.create_group_thread(
            db,
            creator_id=session.user_id,
            name=data.name,
            participant_ids=data.participant_ids,
            description=data.description,
            avatar_url=data.avatar_url,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return thread_for_user(db, thread, session.user_id)


@router.post(
    "/threads/direct",
    response_model=ThreadRead,
    dependencies=[Depends(require_csrf_header)],
)
def open_direct_thread(
    data: DirectThreadCreate,
    response: Response,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Reuse the direct thread with a user, or create it (201)."""
    try:
        thread, created = chat_service.get_or_create_direct_thread(db, session.user_id, data.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if created:
        response.status_code = 201
    return thread_for_user(db, thread, session.user_id)


@router.get("/threads/{thread_id}", response_model=ThreadRead)
def get_thread(
    thread_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, _ = _require_membership(db, thread_id, session.user_id)
    return thread_for_user(db, thread, session.user_id)


@router.patch(
    "/threads/{thread_id}",
    response_model=ThreadRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_thread(
    thread_id: int,
    data: ThreadUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, participant = _require_membership(db, thread_id, session.user_id)
    _require_manager(thread, participant, session.user_id)
    thread = chat_service.update_thread(db, thread, data.model_dump(exclude_unset=True))
    return thread_for_user(db, thread, session.user_id)


@router.delete("/threads/{thread_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_thread(
    thread_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, participant = _require_membership(db, thread_id, session.user_id)
    _require_manager(thread, participant, session.user_id)
    chat_service.delete_thread(db, thread)
    return Response(status_code=204)


# =============================================================================
# Participants
# =============================================================================


@router.get("/threads/{thread_id}/participants", response_model=list[ParticipantRead])
def list_participants(
    thread_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _require_membership(db, thread_id, session.user_id)
    return [_participant_to_read(p) for p in chat_service.list_participants(db, thread_id)]


@router.post(
    "/threads/{thread_id}/participants",
    response_model=ParticipantRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def add_participant(
    thread_id: int,
    data: ParticipantAdd,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, participant = _require_membership(db, thread_id, session.user_id)
    _require_manager(thread, participant, session.user_id)
    try:
        added = chat_service.add_participant(db, thread, data.user_id, is_admin=data.is_admin)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _participant_to_read(added)


@router.delete(
    "/threads/{thread_id}/participants/{user_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def remove_participant(
    thread_id: int,
    user_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Admins remove anyone; members can remove themselves (leave)."""
    thread, participant = _require_membership(db, thread_id, session.user_id)
    if user_id != session.user_id:
        _require_manager(thread, participant, session.user_id)
    target = chat_service.get_participant(db, thread_id, user_id)
    if not target:
        raise HTTPException(status_code=404, detail="Participant not found")
    chat_service.remove_participant(db, target)
    return Response(status_code=204)


# =============================================================================
# Messages
# =============================================================================


@router.get("/threads/{thread_id}/messages", response_model=list[MessageRead])
def list_messages(
    thread_id: int,
    limit: int = Query(100, ge=1, le=500),
    before_id: int | None = Query(None, ge=1),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _require_membership(db, thread_id, session.user_id)
    messages = chat_service.list_messages(db, thread_id, limit=limit, before_id=before_id)
    return [_message_to_read(m) for m in messages]


@router.post(
    "/threads/{thread_id}/messages",
    response_model=MessageRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def post_message(
    thread_id: int,
    data: MessageCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, _ = _require_membership(db, thread_id, session.user_id)
    message = chat_service.post_message(
        db,
        thread,
        sender_id=session.user_id,
        content=data.content,
        message_type=data.message_type,
        media_url=data.media_url,
    )
    chat_service.notify_participants(db, thread, message, session.display_name)
    return _message_to_read(message)


@router.delete(
    "/threads/{thread_id}/messages/{message_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_message(
    thread_id: int,
    message_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, _ = _require_membership(db, thread_id, session.user_id)
    message = chat_service.get_message(db, thread_id, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.sender_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the sender can delete a message")
    chat_service.delete_message(db, thread, message)
    return Response(status_code=204)


@router.post(
    "/threads/{thread_id}/read",
    response_model=MarkReadResponse,
    dependencies=[Depends(require_csrf_header)],
)
def mark_thread_read(
    thread_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    thread, participant = _require_membership(db, thread_id, session.user_id)
    participant = chat_service.mark_read(db, thread, participant)
    return MarkReadResponse(
        thread_id=thread.id,
        last_read_message_id=participant.last_read_message_id,
        unread_count=chat_service.get_unread_count(db, thread.id, session.user_id),
    )
