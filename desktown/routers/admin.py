"""Admin router - platform stats, office approval, payments and audit trail."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from desktown.core.deps import get_db, require_csrf_header, require_roles
from desktown.db.enums import ADMIN_ROLES, ApprovalStatus
from desktown.schemas.admin import AuditLogListResponse, Financials, GrowthPoint, PlatformStats
from desktown.schemas.auth import UserSession
from desktown.schemas.office import OfficeRead
from desktown.schemas.storefront import OrderRead
from desktown.services import (
    admin_service,
    audit_service,
    notification_service,
    office_service,
    order_service,
)
from desktown.utils.pagination import PaginationParams, get_pagination

router = APIRouter(prefix="/admin")


@router.get("/stats", response_model=PlatformStats)
def get_stats(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return admin_service.get_stats(db)


@router.get("/growth-data", response_model=list[GrowthPoint])
def get_growth_data(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return admin_service.get_growth_data(db)


@router.get("/offices", response_model=list[OfficeRead])
def list_offices(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return admin_service.list_all_offices(db)


@router.get("/offices/pending", response_model=list[OfficeRead])
def list_pending_offices(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return office_service.list_offices_by_approval(db, ApprovalStatus.PENDING.value)


def _review_office(
    db: Session,
    office_id: int,
    approved: bool,
    session: UserSession,
    request: Request,
):
    office = office_service.get_office(db, office_id)
    if not office:
        raise HTTPException(status_code=404, detail="Office not found")

    previous = office.approval_status
    office_service.set_approval(db, office, approved)
    audit_service.log_admin_action(
        db,
        admin_id=session.user_id,
        action="office_approved" if approved else "office_rejected",
        entity_type="office",
        entity_id=office.id,
        details={"from": previous, "to": office.approval_status},
        request=request,
    )
    db.commit()
    db.refresh(office)
    notification_service.notify_office_reviewed(db, office, approved)
    return office


@router.post(
    "/offices/{office_id}/approve",
    response_model=OfficeRead,
    dependencies=[Depends(require_csrf_header)],
)
def approve_office(
    office_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return _review_office(db, office_id, True, session, request)


@router.post(
    "/offices/{office_id}/reject",
    response_model=OfficeRead,
    dependencies=[Depends(require_csrf_header)],
)
def reject_office(
    office_id: int,
    request: Request,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return _review_office(db, office_id, False, session, request)


@router.get("/payment-logs", response_model=list[OrderRead])
def list_payment_logs(
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return order_service.list_all_orders(db, limit=pagination.limit, offset=pagination.offset)


@router.get("/financials", response_model=Financials)
def get_financials(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return admin_service.get_financials(db)


@router.get("/audit-logs", response_model=AuditLogListResponse)
def list_audit_logs(
    entity_type: str | None = Query(None, max_length=50),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    items, total = audit_service.list_audit_logs(
        db, entity_type=entity_type, limit=pagination.limit, offset=pagination.offset
    )
    return AuditLogListResponse(items=items, total=total)
