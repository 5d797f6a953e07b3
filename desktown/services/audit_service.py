"""Admin audit trail.

Every admin mutation (office approval, user edits, order overrides) writes
one AdminAuditLog row in the same transaction as the change.
"""

from typing import Any
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.models import AdminAuditLog


def get_client_ip(request: Request | None) -> str | None:
    """
    Client IP for the audit row.

    X-Forwarded-For is only honoured when TRUST_PROXY_HEADERS is set.
    """
    if not request:
        return None
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def log_admin_action(
    db: Session,
    admin_id: UUID,
    action: str,
    entity_type: str | None = None,
    entity_id: Any = None,
    details: dict | None = None,
    request: Request | None = None,
) -> AdminAuditLog:
    """Add an audit row. The caller commits."""
    entry = AdminAuditLog(
        admin_id=admin_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details,
        ip_address=get_client_ip(request),
    )
    db.add(entry)
    return entry


def list_audit_logs(
    db: Session,
    entity_type: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[AdminAuditLog], int]:
    query = db.query(AdminAuditLog)
    if entity_type:
        query = query.filter(AdminAuditLog.entity_type == entity_type)
    total = query.count()
    items = query.order_by(
        AdminAuditLog.created_at.desc(), AdminAuditLog.id.desc()
    ).offset(offset).limit(limit).all()
    return items, total
