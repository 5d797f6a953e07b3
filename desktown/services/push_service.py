"""Web Push delivery for notifications.

Delivery is best-effort: failures are logged and never raised to the
caller. Endpoints the push service reports as gone (404/410) are removed.
"""

import json
import logging
from uuid import UUID

from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.models import Notification, PushSubscription

logger = logging.getLogger(__name__)

GONE_STATUS_CODES = {404, 410}
PUSH_TTL_SECONDS = 24 * 3600


class PushGone(Exception):
    """The subscription endpoint no longer exists."""


def upsert_subscription(
    db: Session,
    user_id: UUID,
    endpoint: str,
    p256dh: str,
    auth: str,
    user_agent: str | None = None,
) -> PushSubscription:
    """Create or re-own a subscription, keyed by endpoint."""
    sub = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
    if sub:
        sub.user_id = user_id
        sub.p256dh = p256dh
        sub.auth = auth
        sub.user_agent = user_agent
    else:
        sub = PushSubscription(
            user_id=user_id,
            endpoint=endpoint,
            p256dh=p256dh,
            auth=auth,
            user_agent=user_agent,
        )
        db.add(sub)
    db.commit()
    db.refresh(sub)
    return sub


def remove_subscription(db: Session, user_id: UUID, endpoint: str) -> bool:
    deleted = db.query(PushSubscription).filter(
        PushSubscription.user_id == user_id,
        PushSubscription.endpoint == endpoint,
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def _deliver(subscription: PushSubscription, payload: str) -> None:
    """
    Send one push message.

    Raises:
        PushGone: endpoint answered 404/410
        Exception: any other delivery failure
    """
    from pywebpush import WebPushException, webpush

    try:
        webpush(
            subscription_info={
                "endpoint": subscription.endpoint,
                "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
            },
            data=payload,
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": settings.VAPID_SUBJECT},
            ttl=PUSH_TTL_SECONDS,
            timeout=settings.PUSH_TIMEOUT_SECONDS,
        )
    except WebPushException as e:
        status = getattr(getattr(e, "response", None), "status_code", None)
        if status in GONE_STATUS_CODES:
            raise PushGone(str(status)) from e
        raise


def build_payload(notification: Notification) -> str:
    return json.dumps({
        "title": notification.title,
        "body": notification.message or "",
        "type": notification.type,
        "data": notification.data or {},
        "notification_id": notification.id,
    })


def send_to_user(db: Session, notification: Notification) -> int:
    """
    Push a notification to every subscription of its user.

    Returns the number of successful deliveries.
    """
    if not settings.push_enabled:
        return 0

    subscriptions = db.query(PushSubscription).filter(
        PushSubscription.user_id == notification.user_id
    ).all()
    if not subscriptions:
        return 0

    payload = build_payload(notification)
    sent = 0
    gone: list[int] = []
    for sub in subscriptions:
        try:
            _deliver(sub, payload)
            sent += 1
        except PushGone:
            gone.append(sub.id)
        except Exception:
            logger.warning("Web push delivery failed for subscription %s", sub.id, exc_info=True)

    if gone:
        db.query(PushSubscription).filter(PushSubscription.id.in_(gone)).delete(
            synchronize_session=False
        )
        db.commit()
        logger.info("Removed %d expired push subscriptions", len(gone))
    return sent
