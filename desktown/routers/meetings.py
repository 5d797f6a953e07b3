"""Meetings router."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.schemas.auth import UserSession
from desktown.schemas.meeting import AttendeeRead, MeetingCreate, MeetingRead, MeetingUpdate
from desktown.services import meeting_service, notification_service

router = APIRouter()


def _get_meeting_or_404(db: Session, meeting_id: int):
    meeting = meeting_service.get_meeting(db, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return meeting


def _require_organizer(meeting, session: UserSession) -> None:
    if meeting.organizer_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the organizer can modify this meeting")


@router.get("/meetings", response_model=list[MeetingRead])
def list_meetings(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return meeting_service.list_meetings(db)


@router.get("/meetings/{meeting_id}", response_model=MeetingRead)
def get_meeting(
    meeting_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _get_meeting_or_404(db, meeting_id)


@router.post(
    "/meetings",
    response_model=MeetingRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_meeting(
    data: MeetingCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        meeting, attendee_ids = meeting_service.create_meeting(db, session.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for user_id in attendee_ids:
        if user_id != session.user_id:
            notification_service.notify_meeting_invite(db, meeting, user_id)
    return meeting


@router.patch(
    "/meetings/{meeting_id}",
    response_model=MeetingRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_meeting(
    meeting_id: int,
    data: MeetingUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    meeting = _get_meeting_or_404(db, meeting_id)
    _require_organizer(meeting, session)
    try:
        meeting, added = meeting_service.update_meeting(db, meeting, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for user_id in added:
        if user_id != session.user_id:
            notification_service.notify_meeting_invite(db, meeting, user_id)
    return meeting


@router.delete("/meetings/{meeting_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_meeting(
    meeting_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    meeting = _get_meeting_or_404(db, meeting_id)
    _require_organizer(meeting, session)
    meeting_service.delete_meeting(db, meeting)
    return Response(status_code=204)


@router.get("/meetings/{meeting_id}/attendees", response_model=list[AttendeeRead])
def list_attendees(
    meeting_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_meeting_or_404(db, meeting_id)
    return [
        AttendeeRead(
            user_id=a.user_id,
            display_name=a.user.display_name if a.user else None,
            email=a.user.email if a.user else None,
            status=a.status,
        )
        for a in meeting_service.list_attendees(db, meeting_id)
    ]
