"""Tests for cookie-session authentication and presence."""
import pytest
from httpx import AsyncClient

from desktown.core.deps import COOKIE_NAME
from desktown.db.models import User


@pytest.mark.asyncio
async def test_protected_endpoint_requires_session(client: AsyncClient):
    response = await client.get("/api/auth/user")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"


@pytest.mark.asyncio
async def test_register_sets_session_cookie(client: AsyncClient, db):
    response = await client.post(
        "/api/register",
        json={"email": "New.Person@Example.com", "password": "long-enough-pw", "username": "newbie"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new.person@example.com"
    assert data["role"] == "member"
    assert "password_hash" not in data
    assert response.cookies.get(COOKIE_NAME)


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email(client: AsyncClient, test_user: User):
    response = await client.post(
        "/api/register",
        json={"email": test_user.email, "password": "long-enough-pw"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_marks_user_online(client: AsyncClient, test_user: User, user_password, db):
    response = await client.post(
        "/api/login", json={"email": test_user.email, "password": user_password}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "online"
    token = response.cookies.get(COOKIE_NAME)
    assert token

    db.refresh(test_user)
    assert test_user.status == "online"


@pytest.mark.asyncio
async def test_login_with_username(client: AsyncClient, make_user, user_password):
    user = make_user(username="handle")
    response = await client.post("/api/login", json={"username": "handle", "password": user_password})
    assert response.status_code == 200
    assert response.json()["id"] == str(user.id)


@pytest.mark.asyncio
async def test_login_rejects_bad_password(client: AsyncClient, test_user: User):
    response = await client.post(
        "/api/login", json={"email": test_user.email, "password": "wrong-password"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_rejects_disabled_user(client: AsyncClient, make_user, user_password):
    user = make_user(is_active=False)
    response = await client.post("/api/login", json={"email": user.email, "password": user_password})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_is_rate_limited(client: AsyncClient, test_user: User):
    statuses = []
    for _ in range(7):
        res = await client.post(
            "/api/login", json={"email": test_user.email, "password": "wrong-password"}
        )
        statuses.append(res.status_code)
    assert 429 in statuses


@pytest.mark.asyncio
async def test_current_user_and_heartbeat(authed_client: AsyncClient, test_user: User):
    me = await authed_client.get("/api/auth/user")
    assert me.status_code == 200
    assert me.json()["email"] == test_user.email
    assert me.json()["display_name"] == "Test User"

    beat = await authed_client.post("/api/auth/heartbeat")
    assert beat.status_code == 200
    assert beat.json()["status"] == "online"
    assert beat.json()["last_seen_at"] is not None


@pytest.mark.asyncio
async def test_logout_marks_offline(authed_client: AsyncClient, test_user: User, db):
    await authed_client.post("/api/auth/heartbeat")
    response = await authed_client.post("/api/logout")
    assert response.status_code == 200

    db.refresh(test_user)
    assert test_user.status == "offline"


@pytest.mark.asyncio
async def test_mutation_requires_csrf_header(make_client, test_user: User):
    no_csrf = make_client(test_user, csrf=False)
    response = await no_csrf.post("/api/auth/heartbeat")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_validation_errors_render_as_400(client: AsyncClient):
    response = await client.post("/api/register", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid data"
    assert body["errors"]
