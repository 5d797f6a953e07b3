"""Office services, share links, public checkout and service orders."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.core.rate_limit import PUBLIC_WRITE_LIMIT, limiter
from desktown.db.enums import ADMIN_ROLES
from desktown.routers.public import services_to_public
from desktown.schemas.auth import UserSession
from desktown.schemas.storefront import (
    CheckoutResponse,
    OrderCreate,
    OrderRead,
    OrderUpdate,
    PublicCheckoutRequest,
    PublicServiceRead,
    ServiceCreate,
    ServiceOfficeSummary,
    ServiceRead,
    ServiceUpdate,
    SharedServiceRead,
    ShareLinkResponse,
)
from desktown.services import office_service, order_service, storefront_service

router = APIRouter()


def _is_admin(session: UserSession) -> bool:
    return session.role in ADMIN_ROLES


def _owned_service(db: Session, service_id: int, session: UserSession):
    service = storefront_service.get_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    if service.owner_user_id != session.user_id and not _is_admin(session):
        raise HTTPException(status_code=403, detail="You can only manage your own services")
    return service


def _owned_order(db: Session, order_id: int, session: UserSession):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    office = office_service.get_office(db, order.office_id)
    if office.owner_id != session.user_id and not _is_admin(session):
        raise HTTPException(status_code=403, detail="You can only manage orders for your offices")
    return order


def _shared_service_or_404(db: Session, token: str):
    service = storefront_service.get_service_by_token(db, token)
    if not service or not service.office.is_published:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


# =============================================================================
# Services
# =============================================================================


@router.get("/services", response_model=list[ServiceRead])
def list_my_services(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return storefront_service.list_services_by_owner(db, session.user_id)


@router.get("/services/{service_id}", response_model=ServiceRead)
def get_service(
    service_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _owned_service(db, service_id, session)


@router.post(
    "/services",
    response_model=ServiceRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_service(
    data: ServiceCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    office = office_service.get_office(db, data.office_id)
    if not office:
        raise HTTPException(status_code=404, detail="Office not found")
    if office.owner_id != session.user_id and not _is_admin(session):
        raise HTTPException(status_code=403, detail="You can only add services to your own office")
    try:
        return storefront_service.create_service(db, office, office.owner_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch(
    "/services/{service_id}",
    response_model=ServiceRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_service(
    service_id: int,
    data: ServiceUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    service = _owned_service(db, service_id, session)
    return storefront_service.update_service(db, service, data.model_dump(exclude_unset=True))


@router.delete("/services/{service_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_service(
    service_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    service = _owned_service(db, service_id, session)
    storefront_service.delete_service(db, service)
    return Response(status_code=204)


@router.get("/services/{service_id}/share-link", response_model=ShareLinkResponse)
def get_share_link(
    service_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    service = _owned_service(db, service_id, session)
    return ShareLinkResponse(
        share_link=storefront_service.share_link(service),
        share_token=service.share_token,
        service_name=service.name,
    )


# =============================================================================
# Public storefront
# =============================================================================


@router.get("/public/paid-services", response_model=list[PublicServiceRead])
def list_paid_services(db: Session = Depends(get_db)):
    return services_to_public(db, storefront_service.list_paid_services(db))


@router.get("/public/services/by-token/{token}", response_model=SharedServiceRead)
def get_shared_service(token: str, db: Session = Depends(get_db)):
    service = _shared_service_or_404(db, token)
    public = services_to_public(db, [service])[0]
    return SharedServiceRead(
        **public.model_dump(),
        share_token=service.share_token,
        office=ServiceOfficeSummary.model_validate(service.office),
    )


@router.post("/public/services/by-token/{token}/checkout", response_model=CheckoutResponse)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def public_checkout(
    request: Request,
    token: str,
    data: PublicCheckoutRequest,
    db: Session = Depends(get_db),
):
    """Create an order for a shared service and open checkout in one step."""
    service = _shared_service_or_404(db, token)
    order = order_service.create_order(
        db,
        service,
        client_name=data.client_name,
        client_email=data.client_email,
        client_phone=data.client_phone,
        notes=data.notes,
    )
    order, checkout = order_service.start_checkout(db, order, service)
    return CheckoutResponse(
        order_id=order.id,
        checkout_url=checkout.url,
        checkout_session_id=checkout.id,
    )


# =============================================================================
# Orders
# =============================================================================


@router.get("/service-orders", response_model=list[OrderRead])
def list_orders(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return order_service.list_orders_for_owner(db, session.user_id)


@router.post(
    "/service-orders",
    response_model=OrderRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_order(
    data: OrderCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    service = _owned_service(db, data.service_id, session)
    return order_service.create_order(
        db,
        service,
        client_name=data.client_name,
        client_email=data.client_email,
        client_phone=data.client_phone,
        notes=data.notes,
        quoted_price=data.quoted_price,
        created_by=session.user_id,
    )


@router.post(
    "/service-orders/{order_id}/checkout",
    response_model=CheckoutResponse,
    dependencies=[Depends(require_csrf_header)],
)
def checkout_order(
    order_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    order = _owned_order(db, order_id, session)
    try:
        order, checkout = order_service.start_checkout(db, order, order.service)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CheckoutResponse(
        order_id=order.id,
        checkout_url=checkout.url,
        checkout_session_id=checkout.id,
    )


@router.patch(
    "/service-orders/{order_id}",
    response_model=OrderRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_order(
    order_id: int,
    data: OrderUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    order = _owned_order(db, order_id, session)
    return order_service.update_order(db, order, data.model_dump(exclude_unset=True))
