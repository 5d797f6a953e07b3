"""Admin dashboard schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class PlatformStats(BaseModel):
    total_users: int
    total_offices: int
    pending_offices: int
    total_orders: int
    paid_revenue: int


class GrowthPoint(BaseModel):
    month: str  # YYYY-MM
    users: int


class OfficeRevenue(BaseModel):
    office_id: int
    office_name: str
    paid_orders: int
    revenue: int


class Financials(BaseModel):
    total_revenue: int
    platform_commission: int
    net_to_offices: int
    commission_rate: float
    paid_orders: int
    by_office: list[OfficeRevenue]


class AuditLogRead(BaseModel):
    id: int
    admin_id: UUID
    action: str
    entity_type: str | None
    entity_id: str | None
    details: dict[str, Any] | None
    ip_address: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    items: list[AuditLogRead]
    total: int
