"""Internal email router."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.schemas.auth import UserSession
from desktown.schemas.email import EmailCreate, EmailRead, EmailUpdate
from desktown.schemas.notification import UnreadCountResponse
from desktown.services import email_service, notification_service

router = APIRouter()


def email_to_read(email) -> EmailRead:
    item = EmailRead.model_validate(email)
    item.sender_name = email.sender.display_name if email.sender else None
    item.recipient_name = email.recipient.display_name if email.recipient else None
    return item


def _visible_email_or_404(db: Session, email_id: int, session: UserSession):
    email = email_service.get_email(db, email_id)
    if not email or not email_service.can_view(email, session.user_id):
        raise HTTPException(status_code=404, detail="Email not found")
    return email


def _folder(db: Session, session: UserSession, folder: str) -> list[EmailRead]:
    return [email_to_read(e) for e in email_service.list_folder(db, session.user_id, folder)]


@router.get("/emails/inbox", response_model=list[EmailRead])
def inbox(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return _folder(db, session, "inbox")


@router.get("/emails/sent", response_model=list[EmailRead])
def sent(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return _folder(db, session, "sent")


@router.get("/emails/drafts", response_model=list[EmailRead])
def drafts(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return _folder(db, session, "drafts")


@router.get("/emails/starred", response_model=list[EmailRead])
def starred(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return _folder(db, session, "starred")


@router.get("/emails/archived", response_model=list[EmailRead])
def archived(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return _folder(db, session, "archived")


@router.get("/emails/unread-count", response_model=UnreadCountResponse)
def unread_count(session: UserSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return UnreadCountResponse(count=email_service.unread_count(db, session.user_id))


@router.get("/emails/{email_id}", response_model=EmailRead)
def get_email(
    email_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Opening an email as its recipient marks it read."""
    email = _visible_email_or_404(db, email_id, session)
    if email.recipient_id == session.user_id and not email.is_read:
        email = email_service.mark_read(db, email)
    return email_to_read(email)


@router.post(
    "/emails",
    response_model=EmailRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def send_email(
    data: EmailCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        email = email_service.send_email(
            db,
            sender_id=session.user_id,
            recipient_id=data.recipient_id,
            subject=data.subject,
            body=data.body,
            is_draft=data.is_draft,
            parent_email_id=data.parent_email_id,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not email.is_draft:
        notification_service.notify_new_email(db, email, session.display_name)
    return email_to_read(email)


@router.patch(
    "/emails/{email_id}",
    response_model=EmailRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_draft(
    email_id: int,
    data: EmailUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    email = _visible_email_or_404(db, email_id, session)
    if email.sender_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the sender can edit a draft")
    try:
        email, sent_now = email_service.update_draft(db, email, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if sent_now:
        notification_service.notify_new_email(db, email, session.display_name)
    return email_to_read(email)


@router.delete("/emails/{email_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_email(
    email_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    email = _visible_email_or_404(db, email_id, session)
    email_service.soft_delete(db, email)
    return Response(status_code=204)


@router.post("/emails/{email_id}/star", response_model=EmailRead, dependencies=[Depends(require_csrf_header)])
def star_email(
    email_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    email = _visible_email_or_404(db, email_id, session)
    return email_to_read(email_service.toggle_star(db, email))


@router.post("/emails/{email_id}/archive", response_model=EmailRead, dependencies=[Depends(require_csrf_header)])
def archive_email(
    email_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    email = _visible_email_or_404(db, email_id, session)
    return email_to_read(email_service.toggle_archive(db, email))


@router.post("/emails/{email_id}/read", response_model=EmailRead, dependencies=[Depends(require_csrf_header)])
def mark_email_read(
    email_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    email = _visible_email_or_404(db, email_id, session)
    if email.recipient_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the recipient can mark an email read")
    return email_to_read(email_service.mark_read(db, email))
