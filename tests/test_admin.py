"""Admin dashboard: stats, office review, financials and audit trail."""
from datetime import datetime, timezone

import pytest

from desktown.db.enums import OrderStatus
from desktown.db.models import AdminAuditLog, Notification, Office, ServiceOrder
from desktown.services import admin_service


@pytest.fixture
def add_order(db):
    def _add(service, price: int, status: OrderStatus = OrderStatus.PAID) -> ServiceOrder:
        order = ServiceOrder(
            service_id=service.id,
            office_id=service.office_id,
            client_name="Client",
            quoted_price=price,
            status=status.value,
        )
        db.add(order)
        db.commit()
        return order
    return _add


@pytest.mark.asyncio
async def test_admin_routes_require_admin(authed_client, manager_client, client):
    assert (await client.get("/api/admin/stats")).status_code == 401
    assert (await authed_client.get("/api/admin/stats")).status_code == 403
    assert (await manager_client.get("/api/admin/stats")).status_code == 403


@pytest.mark.asyncio
async def test_stats(admin_client, admin_user, make_user, make_office, make_service, add_order):
    owner = make_user()
    make_office(owner, approved=False)
    service = make_service(make_office(owner))
    add_order(service, 5000)
    add_order(service, 7000, OrderStatus.AWAITING_PAYMENT)

    stats = (await admin_client.get("/api/admin/stats")).json()
    assert stats == {
        "total_users": 2,
        "total_offices": 2,
        "pending_offices": 1,
        "total_orders": 2,
        "paid_revenue": 5000,
    }


@pytest.mark.asyncio
async def test_approve_office_publishes_and_audits(admin_client, admin_user, make_user, make_office, db):
    owner = make_user()
    office = make_office(owner, approved=False)

    pending = (await admin_client.get("/api/admin/offices/pending")).json()
    assert [o["id"] for o in pending] == [office.id]

    res = await admin_client.post(f"/api/admin/offices/{office.id}/approve")
    assert res.status_code == 200
    assert res.json()["approval_status"] == "approved"
    assert res.json()["is_published"] is True

    [entry] = db.query(AdminAuditLog).all()
    assert entry.admin_id == admin_user.id
    assert entry.action == "office_approved"
    assert entry.entity_type == "office"
    assert entry.entity_id == str(office.id)
    assert entry.details == {"from": "pending", "to": "approved"}

    [note] = db.query(Notification).filter(Notification.user_id == owner.id).all()
    assert note.type == "office_approved"

    assert (await admin_client.get("/api/admin/offices/pending")).json() == []


@pytest.mark.asyncio
async def test_reject_office_unpublishes(admin_client, make_user, make_office, db):
    owner = make_user()
    office = make_office(owner)

    res = await admin_client.post(f"/api/admin/offices/{office.id}/reject")
    assert res.json()["approval_status"] == "rejected"
    db.expire_all()
    assert db.get(Office, office.id).is_published is False

    logs = (await admin_client.get("/api/admin/audit-logs", params={"entity_type": "office"})).json()
    assert logs["total"] == 1
    assert logs["items"][0]["action"] == "office_rejected"
    assert logs["items"][0]["details"] == {"from": "approved", "to": "rejected"}

    none = (await admin_client.get("/api/admin/audit-logs", params={"entity_type": "user"})).json()
    assert none == {"items": [], "total": 0}


@pytest.mark.asyncio
async def test_review_unknown_office_404(admin_client, db):
    res = await admin_client.post("/api/admin/offices/9999/approve")
    assert res.status_code == 404
    assert db.query(AdminAuditLog).count() == 0


@pytest.mark.asyncio
async def test_review_requires_csrf(admin_user, make_client, make_user, make_office):
    office = make_office(make_user(), approved=False)
    no_csrf = make_client(admin_user, csrf=False)
    res = await no_csrf.post(f"/api/admin/offices/{office.id}/approve")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_financials(admin_client, make_user, make_office, make_service, add_order):
    big = make_office(make_user(), name="Big Office")
    small = make_office(make_user(), name="Small Office")
    add_order(make_service(big), 5000)
    add_order(make_service(big), 3333)
    add_order(make_service(small), 1000)
    add_order(make_service(small), 9999, OrderStatus.PAYMENT_FAILED)

    data = (await admin_client.get("/api/admin/financials")).json()
    assert data["total_revenue"] == 9333
    assert data["commission_rate"] == 0.15
    assert data["platform_commission"] == round(9333 * 0.15)
    assert data["net_to_offices"] == 9333 - data["platform_commission"]
    assert data["paid_orders"] == 3
    assert [o["office_name"] for o in data["by_office"]] == ["Big Office", "Small Office"]
    assert data["by_office"][0] == {
        "office_id": big.id,
        "office_name": "Big Office",
        "paid_orders": 2,
        "revenue": 8333,
    }


@pytest.mark.asyncio
async def test_financials_empty(admin_client):
    data = (await admin_client.get("/api/admin/financials")).json()
    assert data["total_revenue"] == 0
    assert data["platform_commission"] == 0
    assert data["by_office"] == []


@pytest.mark.asyncio
async def test_payment_logs(admin_client, make_user, make_office, make_service, add_order):
    service = make_service(make_office(make_user()))
    for price in (100, 200, 300):
        add_order(service, price)

    page = (await admin_client.get("/api/admin/payment-logs", params={"limit": 2})).json()
    assert len(page) == 2


@pytest.mark.asyncio
async def test_growth_endpoint_returns_six_months(admin_client):
    points = (await admin_client.get("/api/admin/growth-data")).json()
    assert len(points) == admin_service.GROWTH_MONTHS
    assert points[-1]["users"] >= 1


def test_growth_data_buckets_by_month(db, make_user):
    make_user(created_at=datetime(2026, 1, 15, tzinfo=timezone.utc))
    make_user(created_at=datetime(2026, 3, 2, tzinfo=timezone.utc))
    make_user(created_at=datetime(2026, 3, 28, tzinfo=timezone.utc))
    make_user(created_at=datetime(2025, 6, 1, tzinfo=timezone.utc))  # outside window

    points = admin_service.get_growth_data(
        db, months=3, now=datetime(2026, 3, 31, tzinfo=timezone.utc)
    )
    assert points == [
        {"month": "2026-01", "users": 1},
        {"month": "2026-02", "users": 0},
        {"month": "2026-03", "users": 2},
    ]


@pytest.mark.asyncio
async def test_list_all_offices(admin_client, make_user, make_office):
    make_office(make_user())
    make_office(make_user(), approved=False)
    offices = (await admin_client.get("/api/admin/offices")).json()
    assert len(offices) == 2
