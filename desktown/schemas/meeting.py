"""Meeting schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class MeetingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    start_time: datetime
    end_time: datetime
    location: str | None = Field(None, max_length=255)
    is_recurring: bool = False
    attendee_ids: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class MeetingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = Field(None, max_length=255)
    is_recurring: bool | None = None
    attendee_ids: list[UUID] | None = None


class MeetingRead(BaseModel):
    id: int
    title: str
    description: str | None
    organizer_id: UUID
    start_time: datetime
    end_time: datetime
    location: str | None
    is_recurring: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AttendeeRead(BaseModel):
    user_id: UUID
    display_name: str | None = None
    email: str | None = None
    status: str
