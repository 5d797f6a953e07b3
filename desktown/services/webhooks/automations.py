"""Signed callbacks from n8n workflows."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.schemas.automation import AutomationCallback, AutomationInternalEmail
from desktown.services import automation_service, email_service, notification_service, user_service
from desktown.services.webhooks.base import parse_json, read_body_safe, verify_sha256_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature"
MAX_PAYLOAD_BYTES = 1 * 1024 * 1024


def _validate(model, data: dict):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(400, f"Invalid payload: {e.errors()[0].get('msg', 'invalid')}")


class AutomationCallbackHandler:
    async def handle(self, request: Request, db: Session, **kwargs):
        """
        Store the AI suggestion for a processing automation.

        The signature may use the owner's n8n api_key or the global
        AUTOMATION_CALLBACK_SECRET.
        """
        body = await read_body_safe(request, MAX_PAYLOAD_BYTES)
        signature = request.headers.get(SIGNATURE_HEADER, "")
        if not signature:
            logger.warning("Automation callback missing signature")
            raise HTTPException(403, "Missing signature")

        payload = _validate(AutomationCallback, parse_json(body))
        automation = automation_service.get_automation(db, payload.automation_id)

        secrets = automation_service.signing_secrets(db, automation)
        if not secrets or not verify_sha256_signature(body, signature, secrets):
            logger.warning("Automation callback invalid signature for automation %s", payload.automation_id)
            raise HTTPException(403, "Invalid signature")
        if not automation:
            raise HTTPException(404, "Automation not found")

        try:
            automation = automation_service.apply_callback(db, automation, payload)
        except ValueError as e:
            raise HTTPException(400, str(e))

        await run_in_threadpool(notification_service.notify_automation_ready, db, automation)
        return {"status": "ok", "automation_id": automation.id, "automation_status": automation.status}


class AutomationEmailHandler:
    async def handle(self, request: Request, db: Session, **kwargs):
        """Deliver an internal email on behalf of a workflow."""
        body = await read_body_safe(request, MAX_PAYLOAD_BYTES)
        signature = request.headers.get(SIGNATURE_HEADER, "")
        if not signature:
            logger.warning("n8n internal email missing signature")
            raise HTTPException(403, "Missing signature")
        if not settings.AUTOMATION_CALLBACK_SECRET:
            logger.error("AUTOMATION_CALLBACK_SECRET not configured")
            raise HTTPException(500, "Webhook not configured")
        if not verify_sha256_signature(body, signature, [settings.AUTOMATION_CALLBACK_SECRET]):
            logger.warning("n8n internal email invalid signature")
            raise HTTPException(403, "Invalid signature")

        payload = _validate(AutomationInternalEmail, parse_json(body))
        sender = user_service.get_user(db, payload.sender_id)
        if not sender:
            raise HTTPException(404, "Sender not found")

        try:
            email = email_service.send_email(
                db,
                sender_id=sender.id,
                recipient_id=payload.recipient_id,
                subject=payload.subject,
                body=payload.body,
            )
        except LookupError as e:
            raise HTTPException(404, str(e))

        await run_in_threadpool(notification_service.notify_new_email, db, email, sender.display_name)

        if payload.automation_id is not None:
            automation = automation_service.get_automation(db, payload.automation_id)
            if automation:
                automation_service.mark_completed(db, automation)
            else:
                logger.info("n8n internal email: unknown automation %s", payload.automation_id)

        return {"status": "ok", "email_id": email.id}
