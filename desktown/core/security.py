"""Security utilities for passwords, JWT session tokens and opaque tokens."""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from desktown.core.config import settings


# =============================================================================
# Password hashing (scrypt)
# =============================================================================

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64


def hash_password(password: str) -> str:
    """
    Hash a password with scrypt.

    Stored as "<hex digest>.<hex salt>".
    """
    salt = secrets.token_hex(16)
    digest = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LEN,
    )
    return f"{digest.hex()}.{salt}"


def verify_password(password: str, stored: str | None) -> bool:
    """Constant-time comparison of a password against a stored scrypt hash."""
    if not stored or "." not in stored:
        return False
    hashed, salt = stored.split(".", 1)
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    supplied = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=len(expected),
    )
    return hmac.compare_digest(expected, supplied)


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(user_id: UUID, role: str, token_version: int) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET).
    """
    payload = {
        "sub": str(user_id),
        "role": role,
        "token_version": token_version,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


# =============================================================================
# Opaque tokens
# =============================================================================

def generate_bearer_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)

