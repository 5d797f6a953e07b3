"""
Automation service - hands tasks to a user's n8n workflow and tracks the
AI suggestion that comes back.

Status flow: pending -> processing -> ready -> approved | rejected.
A failed hand-off reverts processing -> pending. An internal-email action
from n8n finishes the automation as completed.
"""

import logging
from uuid import UUID

import httpx
from sqlalchemy.orm import Session, selectinload

from desktown.core.config import settings
from desktown.db.base import utcnow
from desktown.db.enums import AutomationStatus, TaskStatus
from desktown.db.models import N8nSettings, Task, TaskAutomation
from desktown.services import http_service

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/api/automations/callback"


class AutomationDeliveryError(Exception):
    """The n8n webhook could not be reached or rejected the hand-off."""


# =============================================================================
# Settings
# =============================================================================


def get_settings(db: Session, user_id: UUID) -> N8nSettings | None:
    return db.query(N8nSettings).filter(N8nSettings.user_id == user_id).first()


def upsert_settings(db: Session, user_id: UUID, updates: dict) -> N8nSettings:
    row = get_settings(db, user_id)
    if not row:
        row = N8nSettings(user_id=user_id)
        db.add(row)
    if "webhook_url" in updates:
        url = updates["webhook_url"]
        row.webhook_url = str(url) if url else None
    if "api_key" in updates:
        row.api_key = updates["api_key"] or None
    if updates.get("is_enabled") is not None:
        row.is_enabled = updates["is_enabled"]
    db.commit()
    db.refresh(row)
    return row


def is_configured(row: N8nSettings | None) -> bool:
    return bool(row and row.is_enabled and row.webhook_url)


# =============================================================================
# Queries
# =============================================================================


def _base(db: Session):
    return db.query(TaskAutomation).options(selectinload(TaskAutomation.task))


def get_automation(db: Session, automation_id: int) -> TaskAutomation | None:
    return _base(db).filter(TaskAutomation.id == automation_id).first()


def list_automations(db: Session, user_id: UUID, status: str | None = None) -> list[TaskAutomation]:
    query = _base(db).filter(TaskAutomation.user_id == user_id)
    if status:
        query = query.filter(TaskAutomation.status == status)
    return query.order_by(TaskAutomation.created_at.desc(), TaskAutomation.id.desc()).all()


def list_for_task(db: Session, task_id: int, user_id: UUID) -> list[TaskAutomation]:
    return _base(db).filter(
        TaskAutomation.task_id == task_id,
        TaskAutomation.user_id == user_id,
    ).order_by(TaskAutomation.created_at.desc(), TaskAutomation.id.desc()).all()


# =============================================================================
# Hand-off
# =============================================================================


def start_automation(db: Session, task: Task, user_id: UUID) -> TaskAutomation:
    automation = TaskAutomation(
        task_id=task.id,
        user_id=user_id,
        status=AutomationStatus.PROCESSING.value,
    )
    db.add(automation)
    db.commit()
    db.refresh(automation)
    return automation


def build_payload(automation: TaskAutomation, task: Task) -> dict:
    return {
        "automation_id": automation.id,
        "task": {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "priority": task.priority,
            "status": task.status,
            "due_date": task.due_date.isoformat() if task.due_date else None,
        },
        "callback_url": f"{settings.PUBLIC_BASE_URL.rstrip('/')}{CALLBACK_PATH}",
    }


async def deliver(row: N8nSettings, payload: dict) -> None:
    """
    POST the hand-off to the user's webhook.

    Raises:
        AutomationDeliveryError: transport failure or non-2xx response
    """
    headers = {"X-API-Key": row.api_key} if row.api_key else {}
    try:
        response = await http_service.post_json(
            row.webhook_url,
            payload,
            headers=headers,
            timeout=settings.AUTOMATION_TIMEOUT_SECONDS,
            max_attempts=settings.AUTOMATION_SEND_ATTEMPTS,
        )
    except httpx.HTTPError as exc:
        logger.warning("Automation webhook unreachable for automation %s", payload["automation_id"], exc_info=exc)
        raise AutomationDeliveryError("Automation webhook unreachable") from exc

    if not response.is_success:
        logger.warning(
            "Automation webhook returned %s for automation %s",
            response.status_code, payload["automation_id"],
        )
        raise AutomationDeliveryError(f"Automation webhook returned {response.status_code}")


def revert_to_pending(db: Session, automation: TaskAutomation) -> bool:
    """
    Put a failed hand-off back to pending.

    Conditional on the row still being processing: a callback that landed
    while the POST was in flight keeps its suggestion. Returns True when
    the row was reverted.
    """
    reverted = db.query(TaskAutomation).filter(
        TaskAutomation.id == automation.id,
        TaskAutomation.status == AutomationStatus.PROCESSING.value,
    ).update({TaskAutomation.status: AutomationStatus.PENDING.value}, synchronize_session=False)
    db.commit()
    db.refresh(automation)
    return reverted > 0


# =============================================================================
# Callback / review
# =============================================================================


def signing_secrets(db: Session, automation: TaskAutomation | None) -> list[str]:
    """Owner's api_key first, then the global callback secret."""
    secrets_: list[str] = []
    if automation is not None:
        row = get_settings(db, automation.user_id)
        if row and row.api_key:
            secrets_.append(row.api_key)
    if settings.AUTOMATION_CALLBACK_SECRET:
        secrets_.append(settings.AUTOMATION_CALLBACK_SECRET)
    return secrets_


def apply_callback(db: Session, automation: TaskAutomation, data) -> TaskAutomation:
    """
    Raises:
        ValueError: automation is not processing
    """
    if automation.status != AutomationStatus.PROCESSING.value:
        raise ValueError(f"Automation is {automation.status}, expected processing")
    automation.ai_suggestion = data.ai_suggestion
    automation.ai_metadata = data.ai_metadata
    automation.n8n_execution_id = data.n8n_execution_id
    automation.status = AutomationStatus.READY.value
    db.commit()
    db.refresh(automation)
    return automation


def _require_ready(automation: TaskAutomation) -> None:
    if automation.status != AutomationStatus.READY.value:
        raise ValueError(f"Automation is {automation.status}, expected ready")


def approve(db: Session, automation: TaskAutomation, user_id: UUID) -> TaskAutomation:
    """
    Approve the suggestion and complete the underlying task.

    Raises:
        ValueError: automation is not ready
    """
    _require_ready(automation)
    automation.status = AutomationStatus.APPROVED.value
    automation.approved_at = utcnow()
    automation.approved_by = user_id
    if automation.task:
        automation.task.status = TaskStatus.COMPLETED.value
    db.commit()
    db.refresh(automation)
    return automation


def reject(db: Session, automation: TaskAutomation, reason: str | None) -> TaskAutomation:
    """
    Raises:
        ValueError: automation is not ready
    """
    _require_ready(automation)
    automation.status = AutomationStatus.REJECTED.value
    automation.rejection_reason = reason
    db.commit()
    db.refresh(automation)
    return automation


def mark_completed(db: Session, automation: TaskAutomation) -> TaskAutomation:
    automation.status = AutomationStatus.COMPLETED.value
    db.commit()
    db.refresh(automation)
    return automation


def delete_automation(db: Session, automation: TaskAutomation) -> None:
    db.delete(automation)
    db.commit()
