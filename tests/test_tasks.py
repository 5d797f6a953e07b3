"""Tests for tasks and tickets."""
import pytest
from httpx import AsyncClient

from desktown.db.models import Notification, User


@pytest.mark.asyncio
async def test_create_task_applies_defaults(authed_client: AsyncClient, test_user: User):
    response = await authed_client.post("/api/tasks", json={"title": "Prepare lobby"})
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["priority"] == "medium"
    assert data["assignee_id"] is None
    assert data["creator_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_create_task_keeps_given_values(authed_client: AsyncClient, make_user):
    colleague = make_user()
    response = await authed_client.post(
        "/api/tasks",
        json={"title": "Call supplier", "priority": "high", "assignee_id": str(colleague.id)},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["priority"] == "high"
    assert data["status"] == "pending"
    assert data["assignee_id"] == str(colleague.id)


@pytest.mark.asyncio
async def test_assigning_task_notifies_assignee(authed_client: AsyncClient, make_user, db):
    colleague = make_user()
    await authed_client.post(
        "/api/tasks", json={"title": "Review contract", "assignee_id": str(colleague.id)}
    )
    notes = db.query(Notification).filter(Notification.user_id == colleague.id).all()
    assert len(notes) == 1
    assert notes[0].type == "task_assigned"


@pytest.mark.asyncio
async def test_my_tasks_only_lists_assigned(authed_client: AsyncClient, test_user: User, make_user):
    other = make_user()
    await authed_client.post("/api/tasks", json={"title": "Mine", "assignee_id": str(test_user.id)})
    await authed_client.post("/api/tasks", json={"title": "Theirs", "assignee_id": str(other.id)})

    response = await authed_client.get("/api/me/tasks")
    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_update_and_delete_task(authed_client: AsyncClient):
    created = (await authed_client.post("/api/tasks", json={"title": "Draft"})).json()

    patched = await authed_client.patch(f"/api/tasks/{created['id']}", json={"status": "in_progress"})
    assert patched.status_code == 200
    assert patched.json()["status"] == "in_progress"
    assert patched.json()["title"] == "Draft"

    deleted = await authed_client.delete(f"/api/tasks/{created['id']}")
    assert deleted.status_code == 204
    assert (await authed_client.get(f"/api/tasks/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_task_update_rejects_unknown_fields(authed_client: AsyncClient):
    created = (await authed_client.post("/api/tasks", json={"title": "Draft"})).json()
    response = await authed_client.patch(f"/api/tasks/{created['id']}", json={"creator_id": None})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_ticket_defaults_to_open(authed_client: AsyncClient):
    response = await authed_client.post("/api/tickets", json={"title": "Printer jammed"})
    assert response.status_code == 201
    assert response.json()["status"] == "open"
    assert response.json()["priority"] == "medium"


@pytest.mark.asyncio
async def test_ticket_rejects_unknown_assignee(authed_client: AsyncClient, make_user):
    stranger = "7b0c2f4e-1d7a-4c55-9a3e-2f1b6f0d9c11"
    response = await authed_client.post(
        "/api/tickets", json={"title": "Broken chair", "assignee_id": stranger}
    )
    assert response.status_code == 400

    created = (await authed_client.post("/api/tickets", json={"title": "Broken chair"})).json()
    patched = await authed_client.patch(f"/api/tickets/{created['id']}", json={"assignee_id": stranger})
    assert patched.status_code == 400

    helper = make_user()
    assigned = await authed_client.patch(
        f"/api/tickets/{created['id']}", json={"assignee_id": str(helper.id)}
    )
    assert assigned.status_code == 200
    assert assigned.json()["assignee_id"] == str(helper.id)
