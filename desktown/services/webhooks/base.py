"""Webhook handler interface and shared verification helpers."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Protocol

from fastapi import HTTPException, Request, Response
from sqlalchemy.orm import Session

WebhookResult = dict | Response


class WebhookHandler(Protocol):
    async def handle(self, request: Request, db: Session, **kwargs) -> WebhookResult:
        """Handle a webhook request."""


async def read_body_safe(request: Request, max_bytes: int) -> bytes:
    """Read the raw body, refusing anything over max_bytes with 413."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            if int(content_length) > max_bytes:
                raise HTTPException(413, "Payload too large")
        except ValueError:
            pass

    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        if not chunk:
            continue
        total += len(chunk)
        if total > max_bytes:
            raise HTTPException(413, "Payload too large")
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json(body: bytes) -> dict:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(400, "Invalid JSON")
    if not isinstance(data, dict):
        raise HTTPException(400, "Invalid JSON")
    return data


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_sha256_signature(body: bytes, header: str, secrets: list[str]) -> bool:
    """
    Verify an `X-Signature: sha256=<hex>` header against any of the secrets.
    """
    if not header or not header.startswith("sha256="):
        return False
    provided = header[len("sha256="):].strip()
    return any(
        hmac.compare_digest(hmac_sha256_hex(secret, body), provided)
        for secret in secrets
        if secret
    )
