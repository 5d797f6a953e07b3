"""Role gating across member, manager and admin routes."""
import pytest
from httpx import AsyncClient

from desktown.db.enums import Role
from desktown.db.models import User


@pytest.mark.asyncio
async def test_transactions_are_admin_only(authed_client: AsyncClient, admin_client: AsyncClient):
    assert (await authed_client.get("/api/transactions")).status_code == 403
    assert (await admin_client.get("/api/transactions")).status_code == 200


@pytest.mark.asyncio
async def test_manager_cannot_use_admin_routes(manager_client: AsyncClient):
    assert (await manager_client.get("/api/transactions")).status_code == 403
    assert (await manager_client.get("/api/admin/stats")).status_code == 403


@pytest.mark.asyncio
async def test_jobs_are_manager_routes(authed_client: AsyncClient, manager_client: AsyncClient):
    payload = {"title": "Receptionist", "department": "Front desk", "location": "Riyadh"}
    assert (await authed_client.post("/api/jobs", json=payload)).status_code == 403
    response = await manager_client.post("/api/jobs", json=payload)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_users_listing_hides_password_hash(authed_client: AsyncClient, admin_user: User):
    response = await authed_client.get("/api/users")
    assert response.status_code == 200
    for user in response.json():
        assert "password_hash" not in user


@pytest.mark.asyncio
async def test_status_update_only_for_self(
    authed_client: AsyncClient, test_user: User, admin_user: User
):
    own = await authed_client.patch(f"/api/users/{test_user.id}/status", json={"status": "busy"})
    assert own.status_code == 200
    assert own.json()["status"] == "busy"

    other = await authed_client.patch(f"/api/users/{admin_user.id}/status", json={"status": "busy"})
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_admin_role_change_revokes_sessions(
    admin_client: AsyncClient, make_client, make_user, db
):
    member = make_user(Role.MEMBER)
    member_client = make_client(member)
    assert (await member_client.get("/api/auth/user")).status_code == 200

    response = await admin_client.patch(f"/api/users/{member.id}", json={"role": "manager"})
    assert response.status_code == 200
    assert response.json()["role"] == "manager"

    # The old cookie carries the previous token_version
    assert (await member_client.get("/api/auth/user")).status_code == 401


@pytest.mark.asyncio
async def test_admin_user_update_rejects_unknown_fields(admin_client: AsyncClient, test_user: User):
    response = await admin_client.patch(f"/api/users/{test_user.id}", json={"email": "x@y.z"})
    assert response.status_code == 400
