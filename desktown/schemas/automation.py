"""n8n settings and task automation schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl


class N8nSettingsRead(BaseModel):
    webhook_url: str | None
    has_api_key: bool
    is_enabled: bool
    updated_at: datetime | None = None


class N8nSettingsUpdate(BaseModel):
    webhook_url: HttpUrl | None = None
    api_key: str | None = Field(None, max_length=255)
    is_enabled: bool | None = None

    model_config = {"extra": "forbid"}


class AutomationSendRequest(BaseModel):
    task_id: int


class AutomationRejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=2000)


class AutomationRead(BaseModel):
    id: int
    task_id: int
    task_title: str | None = None
    user_id: UUID
    ai_suggestion: str | None
    ai_metadata: dict | None
    status: str
    approved_at: datetime | None
    approved_by: UUID | None
    rejection_reason: str | None
    n8n_execution_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AutomationCallback(BaseModel):
    """Signed result posted back by the n8n workflow."""
    automation_id: int
    ai_suggestion: str = Field(..., min_length=1)
    ai_metadata: dict | None = None
    n8n_execution_id: str | None = Field(None, max_length=255)


class AutomationInternalEmail(BaseModel):
    """Signed request from n8n to deliver an internal email."""
    sender_id: UUID
    recipient_id: UUID
    subject: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., max_length=100000)
    automation_id: int | None = None
