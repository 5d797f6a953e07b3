"""Webhook handler registry."""

from __future__ import annotations

from desktown.services.webhooks.automations import AutomationCallbackHandler, AutomationEmailHandler
from desktown.services.webhooks.base import WebhookHandler
from desktown.services.webhooks.payments import PaymentWebhookHandler

_HANDLERS: dict[str, WebhookHandler] = {
    "payments": PaymentWebhookHandler(),
    "automation_callback": AutomationCallbackHandler(),
    "automation_email": AutomationEmailHandler(),
}


def get_handler(name: str) -> WebhookHandler:
    handler = _HANDLERS.get(name)
    if not handler:
        raise KeyError(f"Unknown webhook handler: {name}")
    return handler
