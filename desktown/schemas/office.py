"""Office storefront schemas: offices, hierarchy, media, posts, visitor chat."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from desktown.db.enums import OfficeMediaType

SESSION_ID_MIN_LENGTH = 10


# =============================================================================
# Offices
# =============================================================================


class OfficeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=200)
    description: str | None = None
    logo_url: str | None = None
    cover_url: str | None = None
    location: str | None = Field(None, max_length=255)
    category: str = Field("general", max_length=50)
    receptionist_id: UUID | None = None
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    working_hours: str | None = Field(None, max_length=255)


class OfficeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    logo_url: str | None = None
    cover_url: str | None = None
    location: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=50)
    receptionist_id: UUID | None = None
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    working_hours: str | None = Field(None, max_length=255)
    is_published: bool | None = None


class OfficeRead(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None
    logo_url: str | None
    cover_url: str | None
    location: str | None
    category: str
    owner_id: UUID
    receptionist_id: UUID | None
    is_published: bool
    approval_status: str
    contact_email: str | None
    contact_phone: str | None
    working_hours: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OfficeFollowStatus(BaseModel):
    is_following: bool
    follower_count: int


# =============================================================================
# Departments / sections
# =============================================================================


class SectionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    name_ar: str | None = Field(None, max_length=255)
    description: str | None = None
    description_ar: str | None = None
    head_id: UUID | None = None
    sort_order: int = 0
    is_active: bool = True


class SectionUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    name_ar: str | None = Field(None, max_length=255)
    description: str | None = None
    description_ar: str | None = None
    head_id: UUID | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class SectionRead(BaseModel):
    id: int
    department_id: int
    name: str
    name_ar: str | None
    description: str | None
    description_ar: str | None
    head_id: UUID | None
    sort_order: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    name_ar: str | None = Field(None, max_length=255)
    description: str | None = None
    description_ar: str | None = None
    manager_id: UUID | None = None
    sort_order: int = 0
    is_active: bool = True


class DepartmentUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    name_ar: str | None = Field(None, max_length=255)
    description: str | None = None
    description_ar: str | None = None
    manager_id: UUID | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class DepartmentRead(BaseModel):
    id: int
    office_id: int
    name: str
    name_ar: str | None
    description: str | None
    description_ar: str | None
    manager_id: UUID | None
    sort_order: int
    is_active: bool
    created_at: datetime
    sections: list[SectionRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


# =============================================================================
# Media / posts
# =============================================================================


class OfficeMediaCreate(BaseModel):
    type: OfficeMediaType
    title: str | None = Field(None, max_length=255)
    content: str | None = None
    media_url: str | None = None
    thumbnail_url: str | None = None
    duration: int | None = Field(None, ge=0)
    is_pinned: bool = False
    expires_at: datetime | None = None


class OfficeMediaRead(BaseModel):
    id: int
    office_id: int
    type: str
    title: str | None
    content: str | None
    media_url: str | None
    thumbnail_url: str | None
    duration: int | None
    is_pinned: bool
    expires_at: datetime | None
    views: int
    created_at: datetime

    model_config = {"from_attributes": True}


class OfficePostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    media_url: str | None = None
    media_type: str | None = Field(None, max_length=30)


class OfficePostRead(BaseModel):
    id: int
    office_id: int
    author_id: UUID
    content: str
    media_url: str | None
    media_type: str | None
    likes: int
    created_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Visitor chat
# =============================================================================


class VisitorMessageCreate(BaseModel):
    session_id: str = Field(..., min_length=SESSION_ID_MIN_LENGTH, max_length=255)
    content: str = Field(..., min_length=1, max_length=5000)
    sender_name: str | None = Field(None, max_length=255)
    sender_email: EmailStr | None = None


class ReceptionistMessageCreate(BaseModel):
    session_id: str = Field(..., min_length=SESSION_ID_MIN_LENGTH, max_length=255)
    content: str = Field(..., min_length=1, max_length=5000)


class OfficeMessageRead(BaseModel):
    id: int
    office_id: int
    session_id: str
    sender_type: str
    sender_name: str | None
    sender_email: str | None
    sender_id: UUID | None
    content: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadMessagesResponse(BaseModel):
    count: int
