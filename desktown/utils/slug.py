"""URL slug helpers."""

import re
import secrets

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
MAX_SLUG_LENGTH = 200


def slugify(value: str) -> str:
    """
    Lowercase, ASCII-safe slug.

    "Acme Dental Clinic!" -> "acme-dental-clinic"
    """
    slug = _NON_SLUG_RE.sub("-", value.strip().lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def slug_with_suffix(value: str) -> str:
    """Slug plus a short random suffix, for names that need not be unique."""
    base = slugify(value) or "item"
    return f"{base}-{secrets.token_hex(3)}"
