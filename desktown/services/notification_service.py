"""
Notification Service - in-app notifications.

Creating a notification also attempts Web Push delivery to the user's
browsers. Trigger helpers for task/email/order events live at the bottom.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.enums import NotificationType
from desktown.db.models import Notification
from desktown.services import push_service

logger = logging.getLogger(__name__)


# =============================================================================
# Notification CRUD
# =============================================================================


def create_notification(
    db: Session,
    user_id: UUID,
    type: NotificationType,
    title: str,
    message: str | None = None,
    data: dict | None = None,
    push: bool = True,
) -> Notification:
    """Create a notification and try to push it. Commits."""
    notification = Notification(
        user_id=user_id,
        type=type.value,
        title=title,
        message=message,
        data=data,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    if push:
        try:
            push_service.send_to_user(db, notification)
        except Exception:
            logger.warning("Push fan-out failed for notification %s", notification.id, exc_info=True)
    return notification


def list_notifications(
    db: Session,
    user_id: UUID,
    unread_only: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(
        Notification.created_at.desc(), Notification.id.desc()
    ).offset(offset).limit(limit).all()


def get_unread_count(db: Session, user_id: UUID) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False),
    ).count()


def mark_read(db: Session, notification_id: int, user_id: UUID) -> Notification | None:
    """Mark one notification read. Returns None if it is not the user's."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        return None
    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: UUID) -> int:
    count = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False),
    ).update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return count


# =============================================================================
# Triggers
# =============================================================================


def notify_task_assigned(db: Session, task, actor_name: str) -> Notification | None:
    if not task.assignee_id:
        return None
    return create_notification(
        db,
        user_id=task.assignee_id,
        type=NotificationType.TASK_ASSIGNED,
        title=f"New task: {task.title}",
        message=f"{actor_name} assigned you a task",
        data={"task_id": task.id},
    )


def notify_new_email(db: Session, email, sender_name: str) -> Notification:
    return create_notification(
        db,
        user_id=email.recipient_id,
        type=NotificationType.NEW_EMAIL,
        title=f"New email from {sender_name}",
        message=email.subject,
        data={"email_id": email.id},
    )


def notify_meeting_invite(db: Session, meeting, user_id: UUID) -> Notification:
    return create_notification(
        db,
        user_id=user_id,
        type=NotificationType.MEETING_INVITE,
        title=f"Meeting invite: {meeting.title}",
        data={"meeting_id": meeting.id},
    )


def notify_automation_ready(db: Session, automation) -> Notification:
    return create_notification(
        db,
        user_id=automation.user_id,
        type=NotificationType.AUTOMATION_READY,
        title="Automation suggestion ready",
        message="An AI suggestion is waiting for your review",
        data={"automation_id": automation.id, "task_id": automation.task_id},
    )


def notify_order_paid(db: Session, order, owner_id: UUID) -> Notification:
    return create_notification(
        db,
        user_id=owner_id,
        type=NotificationType.ORDER_PAID,
        title=f"Order #{order.id} paid",
        message=f"{order.client_name} paid {order.quoted_price} {order.currency}",
        data={"order_id": order.id, "office_id": order.office_id},
    )


def notify_office_reviewed(db: Session, office, approved: bool) -> Notification:
    type_ = NotificationType.OFFICE_APPROVED if approved else NotificationType.OFFICE_REJECTED
    verdict = "approved" if approved else "rejected"
    return create_notification(
        db,
        user_id=office.owner_id,
        type=type_,
        title=f"Office {verdict}",
        message=f"{office.name} was {verdict}",
        data={"office_id": office.id},
    )


def notify_service_request(db: Session, request_row, service, owner_id: UUID) -> Notification:
    return create_notification(
        db,
        user_id=owner_id,
        type=NotificationType.SERVICE_REQUEST,
        title=f"New request for {service.name}",
        message=f"{request_row.visitor_name} ({request_row.visitor_email})",
        data={"service_id": service.id, "request_id": request_row.id},
    )


def notify_incoming_video_call(db: Session, call, user_id: UUID) -> Notification:
    return create_notification(
        db,
        user_id=user_id,
        type=NotificationType.VIDEO_CALL,
        title="Incoming video call",
        message=call.visitor_name or "A visitor is calling",
        data={"office_id": call.office_id, "call_id": call.id, "room_id": call.room_id},
    )
