"""Tests for offices, their hierarchy, visitor chat and follows."""
import pytest
from httpx import AsyncClient

from desktown.db.enums import Role
from desktown.db.models import (
    CompanyDepartment,
    CompanySection,
    Office,
    OfficeMedia,
    OfficePost,
    OfficeService,
    ServiceRating,
)


@pytest.mark.asyncio
async def test_create_office_starts_pending(manager_client: AsyncClient, manager_user):
    response = await manager_client.post("/api/offices", json={"name": "Acme Legal Services"})
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "acme-legal-services"
    assert data["approval_status"] == "pending"
    assert data["is_published"] is False
    assert data["owner_id"] == str(manager_user.id)


@pytest.mark.asyncio
async def test_create_office_rejects_duplicate_slug(manager_client: AsyncClient):
    await manager_client.post("/api/offices", json={"name": "Acme"})
    response = await manager_client.post("/api/offices", json={"name": "Other", "slug": "ACME"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_members_cannot_create_offices(authed_client: AsyncClient):
    response = await authed_client.post("/api/offices", json={"name": "Nope"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_publish_requires_approval(manager_client: AsyncClient):
    office = (await manager_client.post("/api/offices", json={"name": "Waiting Room"})).json()
    response = await manager_client.patch(f"/api/offices/{office['id']}", json={"is_published": True})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_other_manager_cannot_edit_office(make_client, make_user, make_office):
    owner, rival = make_user(Role.MANAGER), make_user(Role.MANAGER)
    office = make_office(owner)

    response = await make_client(rival).patch(f"/api/offices/{office.id}", json={"name": "Mine now"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_lists_all_offices(admin_client, make_user, make_office):
    make_office(make_user(Role.MANAGER))
    make_office(make_user(Role.MANAGER))
    response = await admin_client.get("/api/offices")
    assert response.status_code == 200
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_department_and_section_hierarchy(manager_client: AsyncClient, manager_user, make_office):
    office = make_office(manager_user)

    dept = await manager_client.post(
        f"/api/offices/{office.id}/departments", json={"name": "Sales", "sort_order": 1}
    )
    assert dept.status_code == 201
    dept_id = dept.json()["id"]

    section = await manager_client.post(
        f"/api/departments/{dept_id}/sections", json={"name": "Inbound"}
    )
    assert section.status_code == 201

    listing = await manager_client.get(f"/api/offices/{office.id}/departments")
    assert listing.status_code == 200
    [department] = listing.json()
    assert department["name"] == "Sales"
    assert [s["name"] for s in department["sections"]] == ["Inbound"]


@pytest.mark.asyncio
async def test_delete_office_cascades(
    manager_client: AsyncClient, manager_user, make_office, make_service, db
):
    office = make_office(manager_user)
    office_id = office.id
    service = make_service(office)
    db.add(ServiceRating(service_id=service.id, rating=5))
    db.commit()

    dept = (await manager_client.post(
        f"/api/offices/{office_id}/departments", json={"name": "Support"}
    )).json()
    await manager_client.post(f"/api/departments/{dept['id']}/sections", json={"name": "Tier 1"})
    await manager_client.post(
        f"/api/offices/{office_id}/media", json={"type": "announcement", "content": "Open today"}
    )
    await manager_client.post(f"/api/offices/{office_id}/posts", json={"content": "Welcome!"})

    response = await manager_client.delete(f"/api/offices/{office_id}")
    assert response.status_code == 204
    db.expire_all()

    assert db.get(Office, office_id) is None
    assert db.query(OfficeService).filter(OfficeService.office_id == office_id).all() == []
    assert db.query(ServiceRating).all() == []
    assert db.query(OfficeMedia).filter(OfficeMedia.office_id == office_id).all() == []
    assert db.query(OfficePost).filter(OfficePost.office_id == office_id).all() == []
    assert db.query(CompanyDepartment).filter(CompanyDepartment.office_id == office_id).all() == []
    assert db.query(CompanySection).all() == []

    assert (await manager_client.get(f"/api/offices/{office_id}/departments")).status_code == 404


@pytest.mark.asyncio
async def test_public_listing_only_shows_published(client: AsyncClient, make_user, make_office):
    owner = make_user(Role.MANAGER)
    live = make_office(owner, name="Live Office")
    hidden = make_office(owner, approved=False, name="Hidden Office")

    listing = await client.get("/api/public/offices")
    assert [o["id"] for o in listing.json()] == [live.id]

    assert (await client.get(f"/api/public/offices/{live.slug}")).status_code == 200
    assert (await client.get(f"/api/public/offices/{hidden.slug}")).status_code == 404


@pytest.mark.asyncio
async def test_visitor_chat_round_trip(client: AsyncClient, make_client, make_user, make_office):
    owner, receptionist = make_user(Role.MANAGER), make_user(Role.MEMBER)
    office = make_office(owner, receptionist_id=receptionist.id)
    session_id = "visitor-session-0001"

    sent = await client.post(
        f"/api/public/offices/{office.id}/messages",
        json={"session_id": session_id, "content": "Are you open on Friday?", "sender_name": "Sam"},
    )
    assert sent.status_code == 201
    assert sent.json()["sender_type"] == "visitor"

    staff = make_client(receptionist)
    unread = await staff.get(f"/api/offices/{office.id}/messages/unread")
    assert unread.json() == {"count": 1}

    reply = await staff.post(
        f"/api/offices/{office.id}/messages",
        json={"session_id": session_id, "content": "Yes, 9 to 5."},
    )
    assert reply.status_code == 201
    assert reply.json()["sender_type"] == "receptionist"
    assert (await staff.get(f"/api/offices/{office.id}/messages/unread")).json() == {"count": 0}

    conversation = await client.get(
        f"/api/public/offices/{office.id}/messages", params={"session_id": session_id}
    )
    assert [m["sender_type"] for m in conversation.json()] == ["visitor", "receptionist"]


@pytest.mark.asyncio
async def test_outsider_cannot_read_visitor_messages(authed_client: AsyncClient, make_user, make_office):
    office = make_office(make_user(Role.MANAGER))
    response = await authed_client.get(f"/api/offices/{office.id}/messages")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_follow_and_unfollow(authed_client: AsyncClient, make_user, make_office):
    office = make_office(make_user(Role.MANAGER))

    followed = await authed_client.post(f"/api/offices/{office.id}/follow")
    assert followed.json() == {"is_following": True, "follower_count": 1}
    assert (await authed_client.post(f"/api/offices/{office.id}/follow")).status_code == 400

    unfollowed = await authed_client.delete(f"/api/offices/{office.id}/follow")
    assert unfollowed.json() == {"is_following": False, "follower_count": 0}
    assert (await authed_client.delete(f"/api/offices/{office.id}/follow")).status_code == 400


@pytest.mark.asyncio
async def test_visitor_messages_are_rate_limited(client: AsyncClient, make_user, make_office):
    from desktown.core.config import settings

    office = make_office(make_user())
    statuses = []
    for i in range(settings.RATE_LIMIT_PUBLIC_WRITE + 2):
        res = await client.post(
            f"/api/public/offices/{office.id}/messages",
            json={"session_id": "visitor-session-0002", "content": f"Hello {i}"},
        )
        statuses.append(res.status_code)
    assert statuses[0] == 201
    assert 429 in statuses
