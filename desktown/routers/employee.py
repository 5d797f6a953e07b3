"""
Employee portal router.

A separate client surface authenticated with bearer tokens instead of
the session cookie. Tokens live in the shared token store and expire
after EMPLOYEE_TOKEN_TTL_HOURS.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.core.deps import get_db, get_employee_token, get_employee_user
from desktown.core.rate_limit import AUTH_LIMIT, limiter
from desktown.core.security import generate_bearer_token
from desktown.core.token_store import get_token_store
from desktown.db.enums import ObjectVisibility, PresenceStatus
from desktown.routers.chat_shared import _message_to_read, thread_for_user, threads_for_user
from desktown.routers.emails import email_to_read
from desktown.routers.storage import receive_upload, upload_response
from desktown.schemas.auth import UserRead
from desktown.schemas.chat import DirectThreadCreate, MessageCreate, MessageRead, ThreadRead
from desktown.schemas.email import EmailCreate, EmailRead
from desktown.schemas.employee import EmployeeLoginRequest, EmployeeLoginResponse
from desktown.schemas.storage import MediaVisibilityUpdate, UploadResponse
from desktown.schemas.task import TaskRead
from desktown.services import (
    auth_service,
    chat_service,
    email_service,
    notification_service,
    object_storage_service,
    task_service,
    user_service,
)

router = APIRouter(prefix="/employee")


def _thread_member_or_error(db: Session, thread_id: int, user):
    thread = chat_service.get_thread(db, thread_id)
    if not thread:
        raise HTTPException(status_code=404, detail="Thread not found")
    if not chat_service.get_participant(db, thread_id, user.id):
        raise HTTPException(status_code=403, detail="Not a participant of this thread")
    return thread


@router.post("/login", response_model=EmployeeLoginResponse)
@limiter.limit(AUTH_LIMIT)
def employee_login(
    request: Request,
    data: EmployeeLoginRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.authenticate(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    ttl = settings.EMPLOYEE_TOKEN_TTL_HOURS * 3600
    token = generate_bearer_token()
    get_token_store().set(token, str(user.id), ttl)
    user = auth_service.set_presence(db, user, PresenceStatus.ONLINE)
    return EmployeeLoginResponse(token=token, expires_in=ttl, user=UserRead.model_validate(user))


@router.post("/logout", status_code=204)
def employee_logout(
    token: str = Depends(get_employee_token),
    db: Session = Depends(get_db),
):
    user_id = get_token_store().get(token)
    get_token_store().delete(token)
    if user_id:
        user = user_service.get_user(db, UUID(user_id))
        if user:
            auth_service.set_presence(db, user, PresenceStatus.OFFLINE)
    return Response(status_code=204)


@router.get("/tasks", response_model=list[TaskRead])
def my_tasks(user=Depends(get_employee_user), db: Session = Depends(get_db)):
    return task_service.list_tasks(db, assignee_id=user.id)


@router.get("/team", response_model=list[UserRead])
def team(user=Depends(get_employee_user), db: Session = Depends(get_db)):
    """Active colleagues, excluding the caller."""
    return user_service.list_team(db, exclude_user_id=user.id)


# =============================================================================
# Chat
# =============================================================================


@router.get("/threads", response_model=list[ThreadRead])
def my_threads(user=Depends(get_employee_user), db: Session = Depends(get_db)):
    return threads_for_user(db, user.id)


@router.post("/threads/direct", response_model=ThreadRead)
def open_direct_thread(
    data: DirectThreadCreate,
    response: Response,
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    try:
        thread, created = chat_service.get_or_create_direct_thread(db, user.id, data.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if created:
        response.status_code = 201
    return thread_for_user(db, thread, user.id)


@router.get("/threads/{thread_id}/messages", response_model=list[MessageRead])
def thread_messages(
    thread_id: int,
    limit: int = Query(100, ge=1, le=500),
    before_id: int | None = Query(None, ge=1),
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    _thread_member_or_error(db, thread_id, user)
    messages = chat_service.list_messages(db, thread_id, limit=limit, before_id=before_id)
    return [_message_to_read(m) for m in messages]


@router.post("/threads/{thread_id}/messages", response_model=MessageRead, status_code=201)
def post_thread_message(
    thread_id: int,
    data: MessageCreate,
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    thread = _thread_member_or_error(db, thread_id, user)
    message = chat_service.post_message(
        db,
        thread,
        sender_id=user.id,
        content=data.content,
        message_type=data.message_type,
        media_url=data.media_url,
    )
    chat_service.notify_participants(db, thread, message, user.display_name)
    return _message_to_read(message)


# =============================================================================
# Email
# =============================================================================


@router.get("/emails/inbox", response_model=list[EmailRead])
def inbox(user=Depends(get_employee_user), db: Session = Depends(get_db)):
    return [email_to_read(e) for e in email_service.list_folder(db, user.id, "inbox")]


@router.get("/emails/sent", response_model=list[EmailRead])
def sent(user=Depends(get_employee_user), db: Session = Depends(get_db)):
    return [email_to_read(e) for e in email_service.list_folder(db, user.id, "sent")]


@router.post("/emails", response_model=EmailRead, status_code=201)
def send_email(
    data: EmailCreate,
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    try:
        email = email_service.send_email(
            db,
            sender_id=user.id,
            recipient_id=data.recipient_id,
            subject=data.subject,
            body=data.body,
            is_draft=data.is_draft,
            parent_email_id=data.parent_email_id,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not email.is_draft:
        notification_service.notify_new_email(db, email, user.display_name)
    return email_to_read(email)


@router.post("/upload/media", response_model=UploadResponse, status_code=201)
async def upload_media(
    request: Request,
    file: Annotated[UploadFile, File()],
    visibility: Annotated[ObjectVisibility, Form()] = ObjectVisibility.PUBLIC,
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    return await receive_upload(request, file, db, user.id, visibility)


@router.put("/media", response_model=UploadResponse)
def set_media_visibility(
    data: MediaVisibilityUpdate,
    user=Depends(get_employee_user),
    db: Session = Depends(get_db),
):
    """Only the uploader may change an object's visibility."""
    record = object_storage_service.get_object_record(db, data.object_path)
    if not record:
        raise HTTPException(status_code=404, detail="Object not found")
    if record.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to modify this object")
    return upload_response(object_storage_service.set_visibility(db, record, data.visibility))
