"""Office services and public storefront feedback."""
import pytest

from desktown.db.models import Notification, ServiceRequest


@pytest.fixture
def storefront(make_user, make_office, make_service):
    owner = make_user()
    office = make_office(owner)
    return owner, office, make_service(office)


@pytest.mark.asyncio
async def test_create_service_under_own_office(make_user, make_office, make_client):
    owner = make_user()
    office = make_office(owner)
    owner_client = make_client(owner)

    res = await owner_client.post(
        "/api/services",
        json={"office_id": office.id, "name": "Legal Review", "price": 25000},
    )
    assert res.status_code == 201
    data = res.json()
    assert data["owner_user_id"] == str(owner.id)
    assert data["currency"] == "SAR"
    assert data["slug"].startswith("legal-review")
    assert data["share_token"]

    mine = (await owner_client.get("/api/services")).json()
    assert [s["id"] for s in mine] == [data["id"]]


@pytest.mark.asyncio
async def test_cannot_add_service_to_foreign_office(storefront, authed_client):
    _, office, _ = storefront
    res = await authed_client.post(
        "/api/services", json={"office_id": office.id, "name": "Sneaky", "price": 1}
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_update_and_delete_ownership(storefront, make_client, authed_client):
    owner, _, service = storefront
    owner_client = make_client(owner)

    assert (await authed_client.patch(f"/api/services/{service.id}", json={"price": 1})).status_code == 403
    assert (await authed_client.delete(f"/api/services/{service.id}")).status_code == 403

    updated = await owner_client.patch(f"/api/services/{service.id}", json={"price": 7500})
    assert updated.json()["price"] == 7500

    bad = await owner_client.patch(f"/api/services/{service.id}", json={"slug": "hijack"})
    assert bad.status_code == 400

    assert (await owner_client.delete(f"/api/services/{service.id}")).status_code == 204
    assert (await owner_client.get(f"/api/services/{service.id}")).status_code == 404


@pytest.mark.asyncio
async def test_admin_manages_any_service(storefront, admin_client):
    _, _, service = storefront
    res = await admin_client.patch(f"/api/services/{service.id}", json={"is_featured": True})
    assert res.status_code == 200
    assert res.json()["is_featured"] is True


@pytest.mark.asyncio
async def test_ratings_summary(storefront, client):
    _, _, service = storefront
    for stars in (5, 4, 4):
        res = await client.post(
            f"/api/public/services/{service.id}/ratings", json={"rating": stars, "visitor_name": "Guest"}
        )
        assert res.status_code == 201

    summary = (await client.get(f"/api/public/services/{service.id}/ratings")).json()
    assert summary["count"] == 3
    assert summary["average"] == 4.33
    assert len(summary["ratings"]) == 3

    listed = (await client.get(f"/api/public/offices/{service.office_id}/services")).json()
    assert listed[0]["average_rating"] == 4.33
    assert listed[0]["rating_count"] == 3
    assert "share_token" not in listed[0]


@pytest.mark.asyncio
async def test_rating_out_of_range(storefront, client):
    _, _, service = storefront
    res = await client.post(f"/api/public/services/{service.id}/ratings", json={"rating": 6})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_unrated_service_has_no_average(storefront, client):
    _, _, service = storefront
    summary = (await client.get(f"/api/public/services/{service.id}/ratings")).json()
    assert summary == {"ratings": [], "average": None, "count": 0}


@pytest.mark.asyncio
async def test_comments_and_replies(storefront, client):
    _, _, service = storefront
    top = await client.post(
        f"/api/public/services/{service.id}/comments",
        json={"content": "  Great service  ", "visitor_name": "Grace", "rating": 5},
    )
    assert top.status_code == 201
    assert top.json()["content"] == "Great service"
    assert top.json()["status"] == "published"

    reply = await client.post(
        f"/api/public/services/{service.id}/comments",
        json={"content": "Thanks!", "parent_id": top.json()["id"]},
    )
    assert reply.json()["parent_id"] == top.json()["id"]

    comments = (await client.get(f"/api/public/services/{service.id}/comments")).json()
    assert len(comments) == 2


@pytest.mark.asyncio
async def test_reply_to_other_services_comment_rejected(storefront, make_service, client):
    _, office, service = storefront
    other = make_service(office)
    top = (
        await client.post(f"/api/public/services/{other.id}/comments", json={"content": "Hi"})
    ).json()

    res = await client.post(
        f"/api/public/services/{service.id}/comments",
        json={"content": "Cross-post", "parent_id": top["id"]},
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_blank_comment_rejected(storefront, client):
    _, _, service = storefront
    res = await client.post(f"/api/public/services/{service.id}/comments", json={"content": "   "})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_service_request_notifies_owner(storefront, client, db):
    owner, _, service = storefront
    res = await client.post(
        f"/api/public/services/{service.id}/request",
        json={"visitor_name": "Grace", "visitor_email": "grace@mail.com", "message": "Call me"},
    )
    assert res.status_code == 201
    assert res.json()["status"] == "pending"

    [row] = db.query(ServiceRequest).all()
    assert row.office_id == service.office_id
    [note] = db.query(Notification).filter(Notification.user_id == owner.id).all()
    assert note.type == "service_request"
    assert note.data == {"service_id": service.id, "request_id": row.id}


@pytest.mark.asyncio
async def test_paid_services_lists_only_live_offices(make_user, make_office, make_service, client):
    live = make_service(make_office(make_user()), is_featured=True)
    make_service(make_office(make_user(), approved=False))
    make_service(make_office(make_user()), is_active=False)
    plain = make_service(make_office(make_user()))

    listed = (await client.get("/api/public/paid-services")).json()
    assert [s["id"] for s in listed] == [live.id, plain.id]


@pytest.mark.asyncio
async def test_inactive_service_hidden_from_feedback(make_user, make_office, make_service, client):
    service = make_service(make_office(make_user()), is_active=False)
    assert (await client.get(f"/api/public/services/{service.id}/ratings")).status_code == 404
