"""Meeting service - meetings and their attendees."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from desktown.db.models import Meeting, MeetingAttendee, User


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def list_meetings(db: Session) -> list[Meeting]:
    return db.query(Meeting).order_by(Meeting.start_time.asc(), Meeting.id.asc()).all()


def get_meeting(db: Session, meeting_id: int) -> Meeting | None:
    return db.query(Meeting).filter(Meeting.id == meeting_id).first()


def _validate_attendees(db: Session, attendee_ids: list[UUID]) -> list[UUID]:
    unique_ids = list(dict.fromkeys(attendee_ids))
    if not unique_ids:
        return []
    found = {row[0] for row in db.query(User.id).filter(User.id.in_(unique_ids)).all()}
    if len(found) != len(unique_ids):
        raise ValueError("Unknown attendee(s)")
    return unique_ids


def create_meeting(db: Session, organizer_id: UUID, data) -> tuple[Meeting, list[UUID]]:
    """
    Create a meeting and its attendee rows.

    Returns (meeting, attendee_ids).

    Raises:
        ValueError: unknown attendee
    """
    attendee_ids = _validate_attendees(db, data.attendee_ids)
    meeting = Meeting(
        title=data.title,
        description=data.description,
        organizer_id=organizer_id,
        start_time=data.start_time,
        end_time=data.end_time,
        location=data.location,
        is_recurring=data.is_recurring,
    )
    db.add(meeting)
    db.flush()
    for user_id in attendee_ids:
        db.add(MeetingAttendee(meeting_id=meeting.id, user_id=user_id))
    db.commit()
    db.refresh(meeting)
    return meeting, attendee_ids


def update_meeting(db: Session, meeting: Meeting, data) -> tuple[Meeting, list[UUID]]:
    """
    Partial update. Replacing attendee_ids keeps existing rows (and
    their RSVP status) for users still listed.

    Returns (meeting, newly_added_attendee_ids).

    Raises:
        ValueError: end_time not after start_time, or unknown attendee
    """
    updates = data.model_dump(exclude_unset=True)
    attendee_ids = updates.pop("attendee_ids", None)

    start = updates.get("start_time") or meeting.start_time
    end = updates.get("end_time") or meeting.end_time
    if _as_utc(end) <= _as_utc(start):
        raise ValueError("end_time must be after start_time")

    for field, value in updates.items():
        if field in ("title", "is_recurring", "start_time", "end_time") and value is None:
            continue
        setattr(meeting, field, value)

    added: list[UUID] = []
    if attendee_ids is not None:
        wanted = _validate_attendees(db, attendee_ids)
        existing = {a.user_id: a for a in meeting.attendees}
        for user_id, attendee in existing.items():
            if user_id not in wanted:
                meeting.attendees.remove(attendee)
        for user_id in wanted:
            if user_id not in existing:
                meeting.attendees.append(MeetingAttendee(user_id=user_id))
                added.append(user_id)

    db.commit()
    db.refresh(meeting)
    return meeting, added


def delete_meeting(db: Session, meeting: Meeting) -> None:
    db.delete(meeting)
    db.commit()


def list_attendees(db: Session, meeting_id: int) -> list[MeetingAttendee]:
    return db.query(MeetingAttendee).options(selectinload(MeetingAttendee.user)).filter(
        MeetingAttendee.meeting_id == meeting_id
    ).order_by(MeetingAttendee.id.asc()).all()
