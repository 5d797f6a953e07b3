"""Notification and Web Push schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    id: int
    type: str
    title: str
    message: str | None
    read: bool
    data: dict | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadCountResponse(BaseModel):
    """Unread count only (for polling)."""
    count: int


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscribeRequest(BaseModel):
    """Browser PushSubscription.toJSON() shape."""
    endpoint: str = Field(..., min_length=1, max_length=2000)
    keys: PushKeys


class PushUnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=2000)


class VapidKeyResponse(BaseModel):
    public_key: str
