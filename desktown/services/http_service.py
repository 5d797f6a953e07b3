"""Outbound HTTP with bounded timeouts and jittered retry/backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


def _backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = min(max_delay, base_delay * (2**attempt))
    return delay + random.uniform(0, delay / 2) if delay else 0.0


async def request_with_retries(
    request_fn: Callable[[], Awaitable[httpx.Response]],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    retry_statuses: set[int] | None = None,
) -> httpx.Response:
    """
    Run request_fn until it returns a non-retryable response.

    Transport errors on the last attempt propagate; a retryable status on
    the last attempt is returned to the caller as-is.
    """
    statuses = retry_statuses or RETRYABLE_STATUSES
    attempts = max(1, max_attempts)

    for attempt in range(attempts):
        last = attempt == attempts - 1
        try:
            response = await request_fn()
        except httpx.RequestError as exc:
            if last:
                raise
            logger.warning("Outbound request failed (attempt %s/%s)", attempt + 1, attempts, exc_info=exc)
        else:
            if last or response.status_code not in statuses:
                return response
            logger.warning(
                "Outbound request returned %s (attempt %s/%s)",
                response.status_code, attempt + 1, attempts,
            )
        delay = _backoff_delay(attempt, base_delay, max_delay)
        if delay:
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")


async def post_json(
    url: str,
    payload: dict,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = 10.0,
    max_attempts: int = 1,
) -> httpx.Response:
    """POST a JSON body, retrying transient failures up to max_attempts."""
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await request_with_retries(
            lambda: client.post(url, json=payload, headers=headers),
            max_attempts=max_attempts,
        )
