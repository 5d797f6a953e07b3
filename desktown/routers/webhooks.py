"""Webhooks router - signed inbound calls from the payment provider and n8n."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from desktown.core.deps import get_db
from desktown.core.rate_limit import WEBHOOK_LIMIT, limiter
from desktown.services.webhooks.registry import get_handler

router = APIRouter()


@router.post("/webhooks/payments")
@limiter.limit(WEBHOOK_LIMIT)
async def payment_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Checkout events from the payment provider.

    Redelivered events answer 200 with "Duplicate event" and change nothing.
    """
    return await get_handler("payments").handle(request, db)


@router.post("/automations/callback")
@limiter.limit(WEBHOOK_LIMIT)
async def automation_callback(request: Request, db: Session = Depends(get_db)):
    """AI suggestion for an automation, signed with X-Signature."""
    return await get_handler("automation_callback").handle(request, db)


@router.post("/n8n/internal-email")
@limiter.limit(WEBHOOK_LIMIT)
async def n8n_internal_email(request: Request, db: Session = Depends(get_db)):
    return await get_handler("automation_email").handle(request, db)
