"""Payment provider webhook handler."""

from __future__ import annotations

import hmac
import logging
import time

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.models import PaymentWebhookEvent
from desktown.services import notification_service, order_service
from desktown.services.webhooks.base import hmac_sha256_hex, parse_json, read_body_safe

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Payment-Signature"
TOLERANCE_SECONDS = 300


def _parse_signature_header(header: str) -> tuple[str, list[str]]:
    """`t=<unix>,v1=<hex>[,v1=<hex>]` -> (timestamp, [signatures])."""
    timestamp = ""
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def verify_payment_signature(
    body: bytes,
    header: str,
    secret: str,
    now: int | None = None,
    tolerance: int = TOLERANCE_SECONDS,
) -> bool:
    """
    Verify HMAC-SHA256(secret, "<t>.<body>") against the v1 signatures.

    Timestamps outside the tolerance window are rejected to stop replays.
    """
    timestamp, signatures = _parse_signature_header(header or "")
    if not timestamp or not signatures:
        return False
    try:
        ts = int(timestamp)
    except ValueError:
        return False
    current = int(time.time()) if now is None else now
    if abs(current - ts) > tolerance:
        return False

    expected = hmac_sha256_hex(secret, timestamp.encode("utf-8") + b"." + body)
    return any(hmac.compare_digest(expected, sig) for sig in signatures)


class PaymentWebhookHandler:
    async def handle(self, request: Request, db: Session, **kwargs):
        """
        Apply checkout events to service orders.

        Handles:
        - checkout.session.completed: awaiting_payment -> paid
        - checkout.session.expired, payment_intent.payment_failed:
          awaiting_payment -> payment_failed

        Security:
        - Validates Payment-Signature with PAYMENT_WEBHOOK_SECRET
        - Deduplicates events via PaymentWebhookEvent
        """
        body = await read_body_safe(request, settings.PAYMENT_WEBHOOK_MAX_PAYLOAD_BYTES)

        if not settings.PAYMENT_WEBHOOK_SECRET:
            logger.error("PAYMENT_WEBHOOK_SECRET not configured")
            raise HTTPException(500, "Webhook not configured")

        signature = request.headers.get(SIGNATURE_HEADER, "")
        if not signature:
            logger.warning("Payment webhook missing signature")
            raise HTTPException(403, "Missing signature")
        if not verify_payment_signature(body, signature, settings.PAYMENT_WEBHOOK_SECRET):
            logger.warning("Payment webhook invalid signature")
            raise HTTPException(403, "Invalid signature")

        data = parse_json(body)
        event_id = data.get("id")
        event_type = data.get("type", "")
        obj = (data.get("data") or {}).get("object") or {}
        if not event_id or not event_type:
            raise HTTPException(400, "Missing event id or type")

        order = order_service.find_order_for_event(db, obj)

        try:
            db.add(
                PaymentWebhookEvent(
                    provider_event_id=str(event_id),
                    event_type=event_type,
                    order_id=order.id if order else None,
                    payload=data,
                )
            )
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info("Payment webhook duplicate event: %s", event_id)
            return {"status": "ok", "message": "Duplicate event"}

        if not order:
            logger.info("Payment webhook: no order for event %s (%s)", event_id, event_type)
            db.commit()
            return {"status": "ok", "message": "No matching order"}

        became_paid = order_service.apply_payment_event(db, order, event_type, obj)
        db.commit()

        if became_paid:
            owner_id = order.service.office.owner_id
            await run_in_threadpool(notification_service.notify_order_paid, db, order, owner_id)

        return {"status": "ok", "event": event_type, "order_id": order.id, "order_status": order.status}
