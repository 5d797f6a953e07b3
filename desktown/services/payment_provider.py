"""
Hosted checkout provider.

Creates checkout sessions for service orders. The session id is what
the provider echoes back in payment webhooks, alongside
metadata.order_id.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

from desktown.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


def create_checkout_session(order, service) -> CheckoutSession:
    """Open a checkout session for one order at its quoted price."""
    session_id = f"cs_{secrets.token_hex(12)}"
    query = urlencode(
        {
            "order_id": order.id,
            "service": service.name,
            "amount": order.quoted_price,
            "currency": order.currency,
        }
    )
    url = f"{settings.PAYMENT_CHECKOUT_BASE_URL.rstrip('/')}/{session_id}?{query}"
    logger.info("Checkout session %s opened for order %s", session_id, order.id)
    return CheckoutSession(id=session_id, url=url)
