"""Video call signaling schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from desktown.schemas.office import SESSION_ID_MIN_LENGTH


class VideoCallCreate(BaseModel):
    session_id: str = Field(..., min_length=SESSION_ID_MIN_LENGTH, max_length=255)
    visitor_name: str | None = Field(None, max_length=255)


class VideoCallEnd(BaseModel):
    session_id: str = Field(..., min_length=SESSION_ID_MIN_LENGTH, max_length=255)


class VideoCallRead(BaseModel):
    id: int
    office_id: int
    session_id: str
    visitor_name: str | None
    room_id: str
    status: str
    receptionist_id: UUID | None
    started_at: datetime | None
    ended_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PublicVideoCallRead(BaseModel):
    """What the visitor's browser polls for; no session id echoed back."""

    room_id: str
    office_id: int
    status: str
    started_at: datetime | None
    ended_at: datetime | None

    model_config = {"from_attributes": True}
