"""Bearer-token store for the employee portal.

Tokens map to a user id and expire on their own: Redis keys are written
with SETEX, and the in-memory store checks the deadline on every read.
The memory store is per-process and only meant for dev/test.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Protocol

logger = logging.getLogger(__name__)

REDIS_DISABLED_URL = "memory://"
KEY_PREFIX = "desktown:employee-token:"
DEFAULT_REDIS_MAX_CONNECTIONS = 20
DEFAULT_REDIS_TIMEOUT_SECONDS = 2.0


class TokenStore(Protocol):
    def set(self, token: str, user_id: str, ttl_seconds: int) -> None: ...

    def get(self, token: str) -> str | None: ...

    def delete(self, token: str) -> None: ...


class MemoryTokenStore:
    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._items: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def set(self, token: str, user_id: str, ttl_seconds: int) -> None:
        with self._lock:
            self._items[token] = (user_id, self._clock() + ttl_seconds)

    def get(self, token: str) -> str | None:
        with self._lock:
            item = self._items.get(token)
            if item is None:
                return None
            user_id, deadline = item
            if self._clock() >= deadline:
                del self._items[token]
                return None
            return user_id

    def delete(self, token: str) -> None:
        with self._lock:
            self._items.pop(token, None)


class RedisTokenStore:
    def __init__(self, client):
        self._client = client

    def set(self, token: str, user_id: str, ttl_seconds: int) -> None:
        self._client.setex(KEY_PREFIX + token, ttl_seconds, user_id)

    def get(self, token: str) -> str | None:
        value = self._client.get(KEY_PREFIX + token)
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    def delete(self, token: str) -> None:
        self._client.delete(KEY_PREFIX + token)


def get_redis_url() -> str | None:
    url = os.getenv("REDIS_URL")
    if not url or url.strip().lower() == REDIS_DISABLED_URL:
        return None
    return url.strip()


def _build_store() -> TokenStore:
    url = get_redis_url()
    if not url:
        return MemoryTokenStore()

    import redis

    pool = redis.ConnectionPool.from_url(
        url,
        max_connections=DEFAULT_REDIS_MAX_CONNECTIONS,
        socket_connect_timeout=DEFAULT_REDIS_TIMEOUT_SECONDS,
        socket_timeout=DEFAULT_REDIS_TIMEOUT_SECONDS,
        retry_on_timeout=True,
    )
    logger.info("Employee tokens stored in Redis")
    return RedisTokenStore(redis.Redis(connection_pool=pool))


_store: TokenStore | None = None


def get_token_store() -> TokenStore:
    global _store
    if _store is None:
        _store = _build_store()
    return _store
