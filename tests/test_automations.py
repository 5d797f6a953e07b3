"""Task automations: hand-off to n8n, signed callback and review."""
import hashlib
import hmac
import json

import httpx
import pytest

from desktown.core.config import settings
from desktown.db.enums import Role
from desktown.db.models import InternalEmail, Task, TaskAutomation
from desktown.services import http_service

API_KEY = "n8n-owner-key"


def _signed(payload: dict, secret: str = API_KEY) -> tuple[str, dict]:
    body = json.dumps(payload)
    digest = hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()
    return body, {"Content-Type": "application/json", "X-Signature": f"sha256={digest}"}


@pytest.fixture
def sent_payloads(monkeypatch):
    """Capture outbound hand-offs instead of calling n8n."""
    calls = []

    async def fake_post_json(url, payload, headers=None, **kwargs):
        calls.append({"url": url, "payload": payload, "headers": headers})
        return httpx.Response(200, request=httpx.Request("POST", url))

    monkeypatch.setattr(http_service, "post_json", fake_post_json)
    return calls


@pytest.fixture
async def configured_manager(make_user, make_client):
    manager = make_user(Role.MANAGER)
    client = make_client(manager)
    res = await client.put(
        "/api/n8n/settings",
        json={"webhook_url": "https://n8n.test/webhook/abc", "api_key": API_KEY, "is_enabled": True},
    )
    assert res.status_code == 200
    assert res.json()["has_api_key"] is True
    return manager, client


async def _send_task(client) -> tuple[int, int]:
    task = (await client.post("/api/tasks", json={"title": "Draft welcome letter"})).json()
    res = await client.post("/api/automations/send", json={"task_id": task["id"]})
    assert res.status_code == 201
    return task["id"], res.json()["id"]


@pytest.mark.asyncio
async def test_send_callback_approve_completes_task(
    configured_manager, sent_payloads, client, db
):
    manager, manager_client = configured_manager
    task_id, automation_id = await _send_task(manager_client)

    [call] = sent_payloads
    assert call["headers"] == {"X-API-Key": API_KEY}
    assert call["payload"]["automation_id"] == automation_id
    assert call["payload"]["callback_url"].endswith("/api/automations/callback")
    assert db.get(TaskAutomation, automation_id).status == "processing"

    body, headers = _signed({"automation_id": automation_id, "ai_suggestion": "Dear guest, ..."})
    callback = await client.post("/api/automations/callback", content=body, headers=headers)
    assert callback.status_code == 200
    assert callback.json()["automation_status"] == "ready"

    pending = (await manager_client.get("/api/automations/pending")).json()
    assert [a["id"] for a in pending] == [automation_id]

    approved = await manager_client.post(f"/api/automations/{automation_id}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["approved_by"] == str(manager.id)

    db.expire_all()
    assert db.get(Task, task_id).status == "completed"

    # Approving twice is not allowed
    again = await manager_client.post(f"/api/automations/{automation_id}/approve")
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_callback_rejects_bad_signature(configured_manager, sent_payloads, client, db):
    _, manager_client = configured_manager
    _, automation_id = await _send_task(manager_client)

    body, headers = _signed(
        {"automation_id": automation_id, "ai_suggestion": "forged"}, secret="wrong-key"
    )
    res = await client.post("/api/automations/callback", content=body, headers=headers)
    assert res.status_code == 403

    missing = await client.post(
        "/api/automations/callback",
        content=body,
        headers={"Content-Type": "application/json"},
    )
    assert missing.status_code == 403
    assert db.get(TaskAutomation, automation_id).status == "processing"


@pytest.mark.asyncio
async def test_callback_accepts_global_secret(
    configured_manager, sent_payloads, client, monkeypatch
):
    monkeypatch.setattr(settings, "AUTOMATION_CALLBACK_SECRET", "global-secret")
    _, manager_client = configured_manager
    _, automation_id = await _send_task(manager_client)

    body, headers = _signed(
        {"automation_id": automation_id, "ai_suggestion": "ok"}, secret="global-secret"
    )
    res = await client.post("/api/automations/callback", content=body, headers=headers)
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_reject_keeps_task_open(configured_manager, sent_payloads, client, db):
    _, manager_client = configured_manager
    task_id, automation_id = await _send_task(manager_client)
    body, headers = _signed({"automation_id": automation_id, "ai_suggestion": "meh"})
    await client.post("/api/automations/callback", content=body, headers=headers)

    rejected = await manager_client.post(
        f"/api/automations/{automation_id}/reject", json={"reason": "Too formal"}
    )
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "Too formal"
    db.expire_all()
    assert db.get(Task, task_id).status == "pending"


@pytest.mark.asyncio
async def test_delivery_failure_reverts_to_pending(configured_manager, monkeypatch, db):
    async def failing_post_json(url, payload, headers=None, **kwargs):
        return httpx.Response(503, request=httpx.Request("POST", url))

    monkeypatch.setattr(http_service, "post_json", failing_post_json)
    _, manager_client = configured_manager
    task = (await manager_client.post("/api/tasks", json={"title": "Summarise"})).json()

    res = await manager_client.post("/api/automations/send", json={"task_id": task["id"]})
    assert res.status_code == 502
    [automation] = db.query(TaskAutomation).all()
    assert automation.status == "pending"


@pytest.mark.asyncio
async def test_timeout_after_callback_keeps_suggestion(configured_manager, monkeypatch, db):
    from desktown.schemas.automation import AutomationCallback
    from desktown.services import automation_service

    async def slow_post_json(url, payload, headers=None, **kwargs):
        automation = db.get(TaskAutomation, payload["automation_id"])
        automation_service.apply_callback(
            db, automation, AutomationCallback(automation_id=automation.id, ai_suggestion="Done early")
        )
        raise httpx.ReadTimeout("workflow kept the connection open")

    monkeypatch.setattr(http_service, "post_json", slow_post_json)
    _, manager_client = configured_manager
    task = (await manager_client.post("/api/tasks", json={"title": "Summarise"})).json()

    res = await manager_client.post("/api/automations/send", json={"task_id": task["id"]})
    assert res.status_code == 201
    assert res.json()["status"] == "ready"
    [automation] = db.query(TaskAutomation).all()
    db.refresh(automation)
    assert automation.status == "ready"
    assert automation.ai_suggestion == "Done early"


@pytest.mark.asyncio
async def test_send_requires_configuration(manager_client):
    task = (await manager_client.post("/api/tasks", json={"title": "Nothing set up"})).json()
    res = await manager_client.post("/api/automations/send", json={"task_id": task["id"]})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_members_cannot_use_automations(authed_client):
    assert (await authed_client.get("/api/automations")).status_code == 403


@pytest.mark.asyncio
async def test_internal_email_webhook(client, make_user, monkeypatch, db):
    monkeypatch.setattr(settings, "AUTOMATION_CALLBACK_SECRET", "global-secret")
    sender, recipient = make_user(), make_user()

    body, headers = _signed(
        {
            "sender_id": str(sender.id),
            "recipient_id": str(recipient.id),
            "subject": "Automated follow-up",
            "body": "Generated text",
        },
        secret="global-secret",
    )
    res = await client.post("/api/n8n/internal-email", content=body, headers=headers)
    assert res.status_code == 200
    [email] = db.query(InternalEmail).all()
    assert email.recipient_id == recipient.id
    assert email.is_draft is False
