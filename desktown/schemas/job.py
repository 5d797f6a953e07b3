"""Job posting schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from desktown.db.enums import JobPostingStatus


class JobPostingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    department: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=255)
    type: str = Field("full-time", max_length=30)
    description: str | None = None
    requirements: str | None = None
    salary: str | None = Field(None, max_length=100)
    status: JobPostingStatus = JobPostingStatus.DRAFT


class JobPostingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    department: str | None = Field(None, min_length=1, max_length=100)
    location: str | None = Field(None, min_length=1, max_length=255)
    type: str | None = Field(None, max_length=30)
    description: str | None = None
    requirements: str | None = None
    salary: str | None = Field(None, max_length=100)
    status: JobPostingStatus | None = None


class JobPostingRead(BaseModel):
    id: int
    title: str
    department: str
    location: str
    type: str
    description: str | None
    requirements: str | None
    salary: str | None
    creator_id: UUID
    status: JobPostingStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PublicJobPostingRead(BaseModel):
    """Careers page view: no creator."""
    id: int
    title: str
    department: str
    location: str
    type: str
    description: str | None
    requirements: str | None
    salary: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
