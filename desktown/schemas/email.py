"""Internal email schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class EmailCreate(BaseModel):
    recipient_id: UUID
    subject: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., max_length=100000)
    is_draft: bool = False
    parent_email_id: int | None = None


class EmailUpdate(BaseModel):
    """Draft edit. Setting is_draft=false sends it."""
    recipient_id: UUID | None = None
    subject: str | None = Field(None, min_length=1, max_length=500)
    body: str | None = Field(None, max_length=100000)
    is_draft: bool | None = None

    model_config = {"extra": "forbid"}


class EmailRead(BaseModel):
    id: int
    sender_id: UUID
    sender_name: str | None = None
    recipient_id: UUID
    recipient_name: str | None = None
    subject: str
    body: str
    is_read: bool
    is_starred: bool
    is_archived: bool
    is_draft: bool
    parent_email_id: int | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
