"""Office service, feedback, request and order schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from desktown.db.enums import MANUAL_ORDER_STATUSES, ServiceRequestStatus


# =============================================================================
# Services
# =============================================================================


class ServiceFields(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    name_ar: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    description_ar: str | None = Field(None, max_length=5000)
    price: int = Field(..., ge=0)
    currency: str = Field("SAR", min_length=3, max_length=3)
    price_type: str = Field("fixed", max_length=20)
    image_url: str | None = None
    category: str | None = Field(None, max_length=100)
    is_featured: bool = False
    is_active: bool = True
    sort_order: int = 0


class ServiceCreate(ServiceFields):
    """Create under one of the caller's offices."""

    office_id: int


class ServiceUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    name_ar: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    description_ar: str | None = Field(None, max_length=5000)
    price: int | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    price_type: str | None = Field(None, max_length=20)
    image_url: str | None = None
    category: str | None = Field(None, max_length=100)
    is_featured: bool | None = None
    is_active: bool | None = None
    sort_order: int | None = None

    model_config = {"extra": "forbid"}


class ServiceRead(BaseModel):
    id: int
    office_id: int
    owner_user_id: UUID
    name: str
    name_ar: str | None
    description: str | None
    description_ar: str | None
    price: int
    currency: str
    price_type: str
    slug: str
    share_token: str
    image_url: str | None
    category: str | None
    is_featured: bool
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PublicServiceRead(BaseModel):
    """Storefront view of a service. The share token is left out."""

    id: int
    office_id: int
    name: str
    name_ar: str | None
    description: str | None
    description_ar: str | None
    price: int
    currency: str
    price_type: str
    slug: str
    image_url: str | None
    category: str | None
    is_featured: bool
    average_rating: float | None = None
    rating_count: int = 0

    model_config = {"from_attributes": True}


class ServiceOfficeSummary(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: str | None

    model_config = {"from_attributes": True}


class SharedServiceRead(PublicServiceRead):
    share_token: str
    office: ServiceOfficeSummary | None = None


class ShareLinkResponse(BaseModel):
    share_link: str
    share_token: str
    service_name: str


# =============================================================================
# Ratings / comments / requests
# =============================================================================


class RatingCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    visitor_name: str | None = Field(None, max_length=255)


class RatingRead(BaseModel):
    id: int
    service_id: int
    visitor_name: str | None
    rating: int
    created_at: datetime

    model_config = {"from_attributes": True}


class RatingSummary(BaseModel):
    ratings: list[RatingRead]
    average: float | None
    count: int


class ServiceCommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    visitor_name: str | None = Field(None, max_length=255)
    visitor_email: EmailStr | None = None
    rating: int | None = Field(None, ge=1, le=5)
    parent_id: int | None = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content is required")
        return v.strip()


class ServiceCommentRead(BaseModel):
    id: int
    service_id: int
    visitor_name: str | None
    content: str
    rating: int | None
    status: str
    parent_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ServiceRequestCreate(BaseModel):
    visitor_name: str = Field(..., min_length=1, max_length=255)
    visitor_email: EmailStr
    visitor_phone: str | None = Field(None, max_length=50)
    message: str | None = Field(None, max_length=5000)


class ServiceRequestRead(BaseModel):
    id: int
    service_id: int
    office_id: int
    visitor_name: str
    visitor_email: str
    visitor_phone: str | None
    message: str | None
    status: ServiceRequestStatus
    created_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Orders
# =============================================================================


class OrderCreate(BaseModel):
    service_id: int
    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: EmailStr | None = None
    client_phone: str | None = Field(None, max_length=20)
    quoted_price: int | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=1000)


class OrderUpdate(BaseModel):
    """Owner edits. Payment states are only reachable through checkout and the webhook."""

    client_name: str | None = Field(None, min_length=1, max_length=200)
    client_email: EmailStr | None = None
    client_phone: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=1000)
    status: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("status")
    @classmethod
    def manual_status_only(cls, v: str | None) -> str | None:
        if v is not None and v not in MANUAL_ORDER_STATUSES:
            allowed = ", ".join(sorted(MANUAL_ORDER_STATUSES))
            raise ValueError(f"Status can only be set to: {allowed}")
        return v


class OrderRead(BaseModel):
    id: int
    service_id: int
    office_id: int
    created_by_user_id: UUID | None
    client_name: str
    client_email: str | None
    client_phone: str | None
    quoted_price: int
    currency: str
    notes: str | None
    status: str
    checkout_session_id: str | None
    payment_intent_id: str | None
    paid_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PublicCheckoutRequest(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: EmailStr | None = None
    client_phone: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=1000)


class CheckoutResponse(BaseModel):
    order_id: int
    checkout_url: str
    checkout_session_id: str
