"""
Service order service.

Order status moves:
    pending | payment_failed -> awaiting_payment   (checkout)
    awaiting_payment -> paid | payment_failed      (payment webhook only)
    * -> cancelled | completed                     (owner, manual)
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from desktown.core.structured_logging import build_log_context
from desktown.db.base import utcnow
from desktown.db.enums import CHECKOUT_ALLOWED_FROM, OrderStatus
from desktown.db.models import Office, OfficeService, ServiceOrder
from desktown.services import payment_provider

logger = logging.getLogger(__name__)

PAID_EVENTS = {"checkout.session.completed"}
FAILED_EVENTS = {"checkout.session.expired", "payment_intent.payment_failed"}


def get_order(db: Session, order_id: int) -> ServiceOrder | None:
    return db.query(ServiceOrder).filter(ServiceOrder.id == order_id).first()


def list_orders_for_owner(db: Session, owner_id: UUID) -> list[ServiceOrder]:
    """Orders placed against any office the user owns."""
    return db.query(ServiceOrder).join(
        Office, Office.id == ServiceOrder.office_id
    ).filter(
        Office.owner_id == owner_id
    ).order_by(ServiceOrder.created_at.desc(), ServiceOrder.id.desc()).all()


def list_all_orders(db: Session, limit: int = 100, offset: int = 0) -> list[ServiceOrder]:
    return db.query(ServiceOrder).order_by(
        ServiceOrder.created_at.desc(), ServiceOrder.id.desc()
    ).offset(offset).limit(limit).all()


def create_order(
    db: Session,
    service: OfficeService,
    client_name: str,
    client_email: str | None = None,
    client_phone: str | None = None,
    notes: str | None = None,
    quoted_price: int | None = None,
    created_by: UUID | None = None,
) -> ServiceOrder:
    order = ServiceOrder(
        service_id=service.id,
        office_id=service.office_id,
        created_by_user_id=created_by,
        client_name=client_name,
        client_email=client_email,
        client_phone=client_phone,
        notes=notes,
        quoted_price=service.price if quoted_price is None else quoted_price,
        currency=service.currency or "SAR",
        status=OrderStatus.PENDING.value,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def _order_log_context(order: ServiceOrder) -> dict:
    return build_log_context(
        user_id=str(order.created_by_user_id) if order.created_by_user_id else None,
        office_id=order.office_id,
        order_id=order.id,
    )


def start_checkout(db: Session, order: ServiceOrder, service: OfficeService):
    """
    Open a provider checkout session and move the order to awaiting_payment.

    Returns:
        (order, checkout session)

    Raises:
        ValueError: order is not in a checkout-able state
    """
    if order.status not in CHECKOUT_ALLOWED_FROM:
        if order.status == OrderStatus.PAID.value:
            raise ValueError("Order already paid")
        raise ValueError(f"Cannot start checkout for an order that is {order.status}")

    checkout = payment_provider.create_checkout_session(order, service)
    order.checkout_session_id = checkout.id
    order.status = OrderStatus.AWAITING_PAYMENT.value
    db.commit()
    db.refresh(order)
    logger.info("Checkout session %s opened", checkout.id, extra=_order_log_context(order))
    return order, checkout


def update_order(db: Session, order: ServiceOrder, updates: dict) -> ServiceOrder:
    for field, value in updates.items():
        if value is None and field in ("client_name", "status"):
            continue
        setattr(order, field, value)
    db.commit()
    db.refresh(order)
    return order


# =============================================================================
# Payment webhook application
# =============================================================================


def find_order_for_event(db: Session, obj: dict) -> ServiceOrder | None:
    """Match by metadata.order_id first, then by checkout session id."""
    metadata = obj.get("metadata") or {}
    raw_order_id = metadata.get("order_id") or metadata.get("orderId")
    if raw_order_id is not None:
        try:
            order = get_order(db, int(raw_order_id))
        except (TypeError, ValueError):
            order = None
        if order:
            return order

    session_id = obj.get("checkout_session_id") or obj.get("id")
    if session_id:
        return db.query(ServiceOrder).filter(
            ServiceOrder.checkout_session_id == str(session_id)
        ).first()
    return None


def apply_payment_event(db: Session, order: ServiceOrder, event_type: str, obj: dict) -> bool:
    """
    Apply one payment event to an order. Does not commit.

    Returns True only when the order just became paid.
    """
    if order.status != OrderStatus.AWAITING_PAYMENT.value:
        logger.info(
            "Payment event %s ignored for order %s in status %s",
            event_type, order.id, order.status,
            extra=_order_log_context(order),
        )
        return False

    if event_type in PAID_EVENTS:
        order.status = OrderStatus.PAID.value
        order.payment_intent_id = obj.get("payment_intent")
        order.invoice_url = obj.get("invoice_url")
        order.paid_at = utcnow()
        logger.info("Order %s paid", order.id, extra=_order_log_context(order))
        return True

    if event_type in FAILED_EVENTS:
        order.status = OrderStatus.PAYMENT_FAILED.value
        logger.info("Order %s payment failed (%s)", order.id, event_type, extra=_order_log_context(order))
        return False

    return False
