"""Automations router - n8n settings and the task hand-off lifecycle."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_db, require_csrf_header, require_roles
from desktown.db.enums import MANAGER_ROLES, AutomationStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.automation import (
    AutomationRead,
    AutomationRejectRequest,
    AutomationSendRequest,
    N8nSettingsRead,
    N8nSettingsUpdate,
)
from desktown.services import automation_service, task_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_read(automation) -> AutomationRead:
    item = AutomationRead.model_validate(automation)
    item.task_title = automation.task.title if automation.task else None
    return item


def _settings_to_read(row) -> N8nSettingsRead:
    if not row:
        return N8nSettingsRead(webhook_url=None, has_api_key=False, is_enabled=False)
    return N8nSettingsRead(
        webhook_url=row.webhook_url,
        has_api_key=bool(row.api_key),
        is_enabled=row.is_enabled,
        updated_at=row.updated_at,
    )


def _own_automation_or_404(db: Session, automation_id: int, session: UserSession):
    automation = automation_service.get_automation(db, automation_id)
    if not automation:
        raise HTTPException(status_code=404, detail="Automation not found")
    if automation.user_id != session.user_id:
        raise HTTPException(status_code=403, detail="Not your automation")
    return automation


# =============================================================================
# Settings
# =============================================================================


@router.get("/n8n/settings", response_model=N8nSettingsRead)
def get_n8n_settings(
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return _settings_to_read(automation_service.get_settings(db, session.user_id))


@router.put("/n8n/settings", response_model=N8nSettingsRead, dependencies=[Depends(require_csrf_header)])
def update_n8n_settings(
    data: N8nSettingsUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    row = automation_service.upsert_settings(db, session.user_id, data.model_dump(exclude_unset=True))
    return _settings_to_read(row)


# =============================================================================
# Automations
# =============================================================================


@router.get("/automations", response_model=list[AutomationRead])
def list_automations(
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return [_to_read(a) for a in automation_service.list_automations(db, session.user_id)]


@router.get("/automations/pending", response_model=list[AutomationRead])
def list_pending_review(
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    """Suggestions waiting for approval."""
    automations = automation_service.list_automations(
        db, session.user_id, status=AutomationStatus.READY.value
    )
    return [_to_read(a) for a in automations]


@router.get("/automations/task/{task_id}", response_model=list[AutomationRead])
def list_task_automations(
    task_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return [_to_read(a) for a in automation_service.list_for_task(db, task_id, session.user_id)]


@router.post(
    "/automations/send",
    response_model=AutomationRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
async def send_to_automation(
    data: AutomationSendRequest,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Hand a task to the caller's n8n workflow.

    A delivery failure leaves the automation pending and answers 502,
    unless the callback already arrived.
    """
    row = automation_service.get_settings(db, session.user_id)
    if not automation_service.is_configured(row):
        raise HTTPException(status_code=400, detail="n8n integration is not enabled or configured")

    task = task_service.get_task(db, data.task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    automation = automation_service.start_automation(db, task, session.user_id)
    try:
        await automation_service.deliver(row, automation_service.build_payload(automation, task))
    except automation_service.AutomationDeliveryError as e:
        if automation_service.revert_to_pending(db, automation):
            raise HTTPException(status_code=502, detail=str(e))
        logger.info("Automation %s answered before its hand-off returned: %s", automation.id, e)
    return _to_read(automation)


@router.post(
    "/automations/{automation_id}/approve",
    response_model=AutomationRead,
    dependencies=[Depends(require_csrf_header)],
)
def approve_automation(
    automation_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    automation = _own_automation_or_404(db, automation_id, session)
    try:
        automation = automation_service.approve(db, automation, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_read(automation)


@router.post(
    "/automations/{automation_id}/reject",
    response_model=AutomationRead,
    dependencies=[Depends(require_csrf_header)],
)
def reject_automation(
    automation_id: int,
    data: AutomationRejectRequest | None = None,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    automation = _own_automation_or_404(db, automation_id, session)
    try:
        automation = automation_service.reject(db, automation, data.reason if data else None)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_read(automation)


@router.delete("/automations/{automation_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_automation(
    automation_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    automation = _own_automation_or_404(db, automation_id, session)
    automation_service.delete_automation(db, automation)
    return Response(status_code=204)
