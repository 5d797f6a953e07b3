"""Pydantic schemas for tasks and tickets."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from desktown.db.enums import TaskPriority, TaskStatus, TicketStatus


class TaskCreate(BaseModel):
    """Request to create a task."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    assignee_id: UUID | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None


class TaskUpdate(BaseModel):
    """Request to update a task (partial)."""
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    assignee_id: UUID | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None

    model_config = {"extra": "forbid"}


class TaskRead(BaseModel):
    id: int
    title: str
    description: str | None
    assignee_id: UUID | None
    creator_id: UUID | None
    priority: TaskPriority
    status: TaskStatus
    due_date: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    assignee_id: UUID | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN


class TicketUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    assignee_id: UUID | None = None
    priority: TaskPriority | None = None
    status: TicketStatus | None = None

    model_config = {"extra": "forbid"}


class TicketRead(BaseModel):
    id: int
    title: str
    description: str | None
    reporter_id: UUID | None
    assignee_id: UUID | None
    priority: TaskPriority
    status: TicketStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
