"""Status (24-hour story) schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class StatusCreate(BaseModel):
    media_url: str = Field(..., min_length=1)
    media_type: Literal["video", "image"] = "video"
    caption: str | None = Field(None, max_length=2000)
    office_id: int | None = None


class StatusRead(BaseModel):
    id: int
    author_id: UUID
    author_name: str
    author_image_url: str | None = None
    office_id: int | None
    office_name: str | None = None
    media_url: str
    media_type: str
    caption: str | None
    expires_at: datetime
    view_count: int
    reply_count: int = 0
    like_count: int = 0
    created_at: datetime


class StatusDetail(StatusRead):
    is_liked: bool = False
    is_following_office: bool = False


class StatusReplyCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class StatusReplyRead(BaseModel):
    id: int
    status_id: int
    sender_id: UUID
    sender_name: str | None = None
    message: str
    is_read: bool
    created_at: datetime


class StatusViewRead(BaseModel):
    viewer_id: UUID
    viewer_name: str | None = None
    viewed_at: datetime


class StatusLikeResponse(BaseModel):
    is_liked: bool
    like_count: int
