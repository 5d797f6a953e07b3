"""Authentication and user schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from desktown.db.enums import PresenceStatus, Role


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency.
    """
    user_id: UUID
    role: Role
    email: str
    display_name: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    username: str | None = Field(None, min_length=2, max_length=100)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class LoginRequest(BaseModel):
    """Login with email or username."""
    email: str | None = None
    username: str | None = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _require_identity(self):
        if not (self.email or self.username):
            raise ValueError("email or username is required")
        return self

    @property
    def identity(self) -> str:
        return (self.email or self.username or "").strip()


class UserRead(BaseModel):
    """User without credentials."""
    id: UUID
    email: str
    username: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    profile_image_url: str | None
    department: str
    role: str
    status: str
    last_seen_at: datetime | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserStatusUpdate(BaseModel):
    status: PresenceStatus


class UserAdminUpdate(BaseModel):
    """Admin edit of another user. Unknown fields are rejected."""
    role: Role | None = None
    department: str | None = Field(None, min_length=1, max_length=100)
    status: PresenceStatus | None = None

    model_config = {"extra": "forbid"}
