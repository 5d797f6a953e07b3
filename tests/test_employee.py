"""Employee portal bearer-token flow."""
import pytest
from httpx import AsyncClient

from desktown.core import token_store


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_login_use_logout(client: AsyncClient, test_user, user_password, db):
    login = await client.post(
        "/api/employee/login", json={"email": test_user.email, "password": user_password}
    )
    assert login.status_code == 200
    data = login.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == 8 * 3600
    assert data["user"]["id"] == str(test_user.id)
    token = data["token"]

    tasks = await client.get("/api/employee/tasks", headers=_bearer(token))
    assert tasks.status_code == 200

    team = await client.get("/api/employee/team", headers={"X-Employee-Token": token})
    assert team.status_code == 200

    logout = await client.post("/api/employee/logout", headers=_bearer(token))
    assert logout.status_code == 204
    db.refresh(test_user)
    assert test_user.status == "offline"

    after = await client.get("/api/employee/tasks", headers=_bearer(token))
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(client: AsyncClient, test_user):
    res = await client.post(
        "/api/employee/login", json={"email": test_user.email, "password": "nope-nope"}
    )
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client: AsyncClient):
    assert (await client.get("/api/employee/tasks")).status_code == 401
    res = await client.get("/api/employee/tasks", headers=_bearer("not-a-real-token"))
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_rejected(client: AsyncClient, test_user):
    now = [1000.0]
    store = token_store.MemoryTokenStore(clock=lambda: now[0])
    token_store._store = store
    store.set("short-lived", str(test_user.id), ttl_seconds=60)

    assert (await client.get("/api/employee/tasks", headers=_bearer("short-lived"))).status_code == 200
    now[0] += 61
    assert (await client.get("/api/employee/tasks", headers=_bearer("short-lived"))).status_code == 401


@pytest.mark.asyncio
async def test_employee_messaging(client: AsyncClient, make_user, user_password):
    alice, bob = make_user(), make_user()
    token = (await client.post(
        "/api/employee/login", json={"email": alice.email, "password": user_password}
    )).json()["token"]

    thread = await client.post(
        "/api/employee/threads/direct", json={"user_id": str(bob.id)}, headers=_bearer(token)
    )
    assert thread.status_code == 201
    thread_id = thread.json()["id"]

    sent = await client.post(
        f"/api/employee/threads/{thread_id}/messages",
        json={"content": "Shift swap tomorrow?"},
        headers=_bearer(token),
    )
    assert sent.status_code == 201

    messages = await client.get(f"/api/employee/threads/{thread_id}/messages", headers=_bearer(token))
    assert [m["content"] for m in messages.json()] == ["Shift swap tomorrow?"]

    mail = await client.post(
        "/api/employee/emails",
        json={"recipient_id": str(bob.id), "subject": "Rota", "body": "See attached"},
        headers=_bearer(token),
    )
    assert mail.status_code == 201
    sent_box = await client.get("/api/employee/emails/sent", headers=_bearer(token))
    assert [e["subject"] for e in sent_box.json()] == ["Rota"]


async def _employee_token(client: AsyncClient, user, password: str) -> str:
    login = await client.post("/api/employee/login", json={"email": user.email, "password": password})
    assert login.status_code == 200
    return login.json()["token"]


@pytest.mark.asyncio
async def test_media_upload_and_visibility(client: AsyncClient, test_user, make_user, user_password, db, tmp_path, monkeypatch):
    from desktown.core.config import settings
    from desktown.db.models import StoredObject

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(tmp_path / "objects"))
    token = await _employee_token(client, test_user, user_password)
    png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

    uploaded = await client.post(
        "/api/employee/upload/media",
        files={"file": ("chat.png", png, "image/png")},
        headers=_bearer(token),
    )
    assert uploaded.status_code == 201
    body = uploaded.json()
    assert body["visibility"] == "public"
    record = db.query(StoredObject).one()
    assert record.owner_id == test_user.id

    updated = await client.put(
        "/api/employee/media",
        json={"object_path": body["object_path"], "visibility": "private"},
        headers=_bearer(token),
    )
    assert updated.status_code == 200
    assert updated.json()["visibility"] == "private"
    assert (await client.get(body["url"])).status_code == 401

    other_token = await _employee_token(client, make_user(), user_password)
    denied = await client.put(
        "/api/employee/media",
        json={"object_path": body["object_path"], "visibility": "public"},
        headers=_bearer(other_token),
    )
    assert denied.status_code == 403

    missing = await client.put(
        "/api/employee/media",
        json={"object_path": "uploads/nothing.png", "visibility": "public"},
        headers=_bearer(token),
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_media_upload_requires_token(client: AsyncClient):
    res = await client.post(
        "/api/employee/upload/media",
        files={"file": ("chat.png", b"\x89PNG", "image/png")},
    )
    assert res.status_code == 401
