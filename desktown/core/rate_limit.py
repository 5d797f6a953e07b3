"""Rate limiting for the DeskTown API."""

import logging
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from desktown.core.config import settings
from desktown.core.token_store import get_redis_url

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
DEFAULT_LIMITS = (
    []
    if IS_TESTING or settings.RATE_LIMIT_API <= 0
    else [f"{settings.RATE_LIMIT_API}/minute"]
)

AUTH_LIMIT = f"{settings.RATE_LIMIT_AUTH}/minute"
WEBHOOK_LIMIT = f"{settings.RATE_LIMIT_WEBHOOK}/minute"
# Anonymous storefront writes: ratings, comments, requests, visitor chat, calls, checkout
PUBLIC_WRITE_LIMIT = f"{settings.RATE_LIMIT_PUBLIC_WRITE}/minute"


def _storage_uri() -> str:
    redis_url = get_redis_url()
    if IS_TESTING or not redis_url:
        return "memory://"
    try:
        import redis

        redis.from_url(redis_url, socket_connect_timeout=1).ping()
    except Exception as e:
        logging.warning(f"Redis unavailable for rate limiting, using in-memory: {e}")
        return "memory://"
    return redis_url


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_storage_uri(),
    default_limits=DEFAULT_LIMITS,
)
