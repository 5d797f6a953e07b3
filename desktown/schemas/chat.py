"""Chat schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from desktown.db.enums import MessageType


class ThreadCreate(BaseModel):
    """Group thread. The caller joins as admin."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    avatar_url: str | None = None
    participant_ids: list[UUID] = Field(default_factory=list)


class DirectThreadCreate(BaseModel):
    user_id: UUID


class ThreadUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    avatar_url: str | None = None


class ParticipantAdd(BaseModel):
    user_id: UUID
    is_admin: bool = False


class ParticipantRead(BaseModel):
    user_id: UUID
    display_name: str
    profile_image_url: str | None = None
    status: str | None = None
    is_admin: bool
    last_read_message_id: int | None
    joined_at: datetime


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    message_type: MessageType = MessageType.TEXT
    media_url: str | None = None


class MessageRead(BaseModel):
    id: int
    thread_id: int
    sender_id: UUID
    sender_name: str | None = None
    content: str
    message_type: str
    media_url: str | None
    created_at: datetime


class ThreadRead(BaseModel):
    id: int
    name: str
    type: str
    creator_id: UUID | None
    avatar_url: str | None
    description: str | None
    last_message_id: int | None
    created_at: datetime
    updated_at: datetime
    unread_count: int = 0
    last_message: MessageRead | None = None
    participants: list[ParticipantRead] = Field(default_factory=list)


class MarkReadResponse(BaseModel):
    thread_id: int
    last_read_message_id: int | None
    unread_count: int
