"""
Video call signaling.

The API only tracks call state; media flows peer-to-peer between the
visitor and the receptionist using the room id as the rendezvous key.
"""

import re
import secrets
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from desktown.db.base import utcnow
from desktown.db.enums import VideoCallStatus
from desktown.db.models import VideoCall

ROOM_ID_RE = re.compile(r"room_[a-f0-9]{32}")

# Allowed from-states per action
_TRANSITIONS = {
    "accept": ({VideoCallStatus.PENDING.value}, VideoCallStatus.ACTIVE.value),
    "decline": ({VideoCallStatus.PENDING.value}, VideoCallStatus.DECLINED.value),
    "end": ({VideoCallStatus.ACTIVE.value}, VideoCallStatus.ENDED.value),
    "visitor_end": (
        {VideoCallStatus.PENDING.value, VideoCallStatus.ACTIVE.value},
        VideoCallStatus.ENDED.value,
    ),
}


def generate_room_id() -> str:
    return f"room_{secrets.token_hex(16)}"


def is_valid_room_id(room_id: str) -> bool:
    return bool(ROOM_ID_RE.fullmatch(room_id))


def get_call(db: Session, call_id: int, office_id: int | None = None) -> VideoCall | None:
    query = db.query(VideoCall).filter(VideoCall.id == call_id)
    if office_id is not None:
        query = query.filter(VideoCall.office_id == office_id)
    return query.first()


def get_call_by_room(db: Session, room_id: str) -> VideoCall | None:
    return db.query(VideoCall).filter(VideoCall.room_id == room_id).first()


def list_calls(db: Session, office_id: int, status: str | None = None) -> list[VideoCall]:
    query = db.query(VideoCall).filter(VideoCall.office_id == office_id)
    if status:
        query = query.filter(VideoCall.status == status)
    return query.order_by(VideoCall.created_at.desc(), VideoCall.id.desc()).all()


def create_call(db: Session, office_id: int, session_id: str, visitor_name: str | None) -> VideoCall:
    call = VideoCall(
        office_id=office_id,
        session_id=session_id,
        visitor_name=visitor_name,
        room_id=generate_room_id(),
        status=VideoCallStatus.PENDING.value,
    )
    db.add(call)
    try:
        db.commit()
    except IntegrityError:
        # room id collision; one retry with a fresh id
        db.rollback()
        call.room_id = generate_room_id()
        db.add(call)
        db.commit()
    db.refresh(call)
    return call


def transition(
    db: Session,
    call: VideoCall,
    action: str,
    receptionist_id: UUID | None = None,
) -> VideoCall:
    """
    Apply a lifecycle action to a call.

    Raises:
        ValueError: the call's current status does not allow the action
    """
    allowed_from, target = _TRANSITIONS[action]
    if call.status not in allowed_from:
        raise ValueError(f"Cannot {action.replace('_', ' ')} a call that is {call.status}")

    now = utcnow()
    call.status = target
    if action == "accept":
        call.receptionist_id = receptionist_id
        call.started_at = now
    elif target == VideoCallStatus.ENDED.value:
        call.ended_at = now
    db.commit()
    db.refresh(call)
    return call
