"""Service orders, checkout and the payment webhook."""
import hashlib
import hmac
import json
import logging
import time

import pytest
from httpx import AsyncClient

from desktown.core.config import settings
from desktown.db.enums import Role
from desktown.db.models import Notification, PaymentWebhookEvent, ServiceOrder

SECRET = "whsec_test_secret"


def _sign(body: str, secret: str = SECRET, timestamp: int | None = None) -> str:
    ts = str(int(time.time()) if timestamp is None else timestamp)
    digest = hmac.new(secret.encode(), f"{ts}.{body}".encode(), hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def _event(event_id: str, event_type: str, order_id: int, **obj) -> str:
    return json.dumps({
        "id": event_id,
        "type": event_type,
        "data": {"object": {"metadata": {"order_id": str(order_id)}, **obj}},
    })


async def _post_event(client: AsyncClient, body: str, signature: str | None = None):
    return await client.post(
        "/api/webhooks/payments",
        content=body,
        headers={
            "Content-Type": "application/json",
            "Payment-Signature": signature if signature is not None else _sign(body),
        },
    )


@pytest.fixture
def webhook_secret(monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", SECRET, raising=False)
    return SECRET


@pytest.fixture
def shop(make_user, make_office, make_service):
    owner = make_user(Role.MANAGER)
    office = make_office(owner)
    service = make_service(office, price=12000)
    return owner, office, service


async def _checkout(client: AsyncClient, service) -> dict:
    response = await client.post(
        f"/api/public/services/by-token/{service.share_token}/checkout",
        json={"client_name": "Dana Client", "client_email": "dana@example.com"},
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_checkout_moves_order_to_awaiting_payment(client: AsyncClient, shop, db):
    _, office, service = shop
    data = await _checkout(client, service)

    assert data["checkout_session_id"].startswith("cs_")
    assert data["checkout_url"].startswith(settings.PAYMENT_CHECKOUT_BASE_URL)

    order = db.get(ServiceOrder, data["order_id"])
    assert order.status == "awaiting_payment"
    assert order.quoted_price == 12000
    assert order.office_id == office.id
    assert order.checkout_session_id == data["checkout_session_id"]


@pytest.mark.asyncio
async def test_webhook_marks_paid_once(client: AsyncClient, shop, webhook_secret, db):
    owner, _, service = shop
    order_id = (await _checkout(client, service))["order_id"]

    body = _event("evt_1", "checkout.session.completed", order_id, payment_intent="pi_123")
    first = await _post_event(client, body)
    assert first.status_code == 200
    assert first.json()["order_status"] == "paid"

    duplicate = await _post_event(client, body)
    assert duplicate.status_code == 200
    assert duplicate.json()["message"] == "Duplicate event"

    db.expire_all()
    order = db.get(ServiceOrder, order_id)
    assert order.status == "paid"
    assert order.payment_intent_id == "pi_123"
    assert order.paid_at is not None
    assert db.query(PaymentWebhookEvent).count() == 1
    paid_notes = db.query(Notification).filter(
        Notification.user_id == owner.id, Notification.type == "order_paid"
    ).count()
    assert paid_notes == 1


@pytest.mark.asyncio
async def test_paid_event_requires_awaiting_payment(client: AsyncClient, shop, webhook_secret, db):
    _, _, service = shop
    order_id = (await _checkout(client, service))["order_id"]

    await _post_event(client, _event("evt_a", "checkout.session.completed", order_id))
    # A later failure event for an already-paid order is ignored
    res = await _post_event(client, _event("evt_b", "payment_intent.payment_failed", order_id))
    assert res.json()["order_status"] == "paid"


@pytest.mark.asyncio
async def test_failed_payment_allows_new_checkout(
    make_client, shop, webhook_secret, client: AsyncClient, db
):
    owner, _, service = shop
    order_id = (await _checkout(client, service))["order_id"]

    res = await _post_event(client, _event("evt_x", "checkout.session.expired", order_id))
    assert res.json()["order_status"] == "payment_failed"

    owner_client = make_client(owner)
    retry = await owner_client.post(f"/api/service-orders/{order_id}/checkout")
    assert retry.status_code == 200
    db.expire_all()
    assert db.get(ServiceOrder, order_id).status == "awaiting_payment"

    await _post_event(client, _event("evt_y", "checkout.session.completed", order_id))
    again = await owner_client.post(f"/api/service-orders/{order_id}/checkout")
    assert again.status_code == 400
    assert again.json()["message"] == "Order already paid"


@pytest.mark.asyncio
async def test_webhook_matches_by_checkout_session(client: AsyncClient, shop, webhook_secret, db):
    _, _, service = shop
    data = await _checkout(client, service)
    body = json.dumps({
        "id": "evt_session",
        "type": "checkout.session.completed",
        "data": {"object": {"id": data["checkout_session_id"]}},
    })
    res = await _post_event(client, body)
    assert res.json()["order_id"] == data["order_id"]
    assert res.json()["order_status"] == "paid"


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(client: AsyncClient, shop, webhook_secret):
    body = _event("evt_bad", "checkout.session.completed", 1)
    res = await _post_event(client, body, signature=_sign(body, secret="wrong"))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_webhook_rejects_stale_timestamp(client: AsyncClient, webhook_secret):
    body = _event("evt_old", "checkout.session.completed", 1)
    res = await _post_event(client, body, signature=_sign(body, timestamp=int(time.time()) - 301))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_webhook_requires_signature(client: AsyncClient, webhook_secret):
    res = await _post_event(client, "{}", signature="")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_webhook_unconfigured_secret(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", "", raising=False)
    res = await _post_event(client, "{}")
    assert res.status_code == 500


@pytest.mark.asyncio
async def test_unknown_order_is_acknowledged(client: AsyncClient, webhook_secret, db):
    res = await _post_event(client, _event("evt_orphan", "checkout.session.completed", 999))
    assert res.status_code == 200
    assert res.json()["message"] == "No matching order"
    assert db.query(PaymentWebhookEvent).count() == 1


@pytest.mark.asyncio
async def test_orders_are_scoped_to_office_owner(make_client, make_user, shop):
    owner, _, service = shop
    owner_client = make_client(owner)
    created = await owner_client.post(
        "/api/service-orders",
        json={"service_id": service.id, "client_name": "Walk-in"},
    )
    assert created.status_code == 201
    assert created.json()["quoted_price"] == 12000
    assert created.json()["status"] == "pending"

    listing = await owner_client.get("/api/service-orders")
    assert [o["id"] for o in listing.json()] == [created.json()["id"]]

    stranger = make_client(make_user(Role.MANAGER))
    assert (await stranger.get("/api/service-orders")).json() == []
    res = await stranger.post(f"/api/service-orders/{created.json()['id']}/checkout")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_manual_status_update(make_client, shop):
    owner, _, service = shop
    owner_client = make_client(owner)
    order = (await owner_client.post(
        "/api/service-orders", json={"service_id": service.id, "client_name": "Walk-in"}
    )).json()

    done = await owner_client.patch(f"/api/service-orders/{order['id']}", json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["status"] == "completed"

    paid = await owner_client.patch(f"/api/service-orders/{order['id']}", json={"status": "paid"})
    assert paid.status_code == 400


@pytest.mark.asyncio
async def test_share_link_and_shared_service(make_client, client: AsyncClient, shop):
    owner, office, service = shop
    link = await make_client(owner).get(f"/api/services/{service.id}/share-link")
    assert link.status_code == 200
    assert link.json()["share_link"].endswith(f"/service/{service.share_token}")

    shared = await client.get(f"/api/public/services/by-token/{service.share_token}")
    assert shared.status_code == 200
    assert shared.json()["office"]["id"] == office.id
    assert (await client.get("/api/public/services/by-token/nope")).status_code == 404


@pytest.mark.asyncio
async def test_payment_logs_carry_order_context(client: AsyncClient, shop, webhook_secret, caplog):
    _, office, service = shop
    order_id = (await _checkout(client, service))["order_id"]

    caplog.set_level(logging.INFO, logger="desktown.services.order_service")
    body = _event("evt_ctx", "checkout.session.completed", order_id)
    response = await _post_event(client, body)
    assert response.status_code == 200

    paid = [r for r in caplog.records if r.getMessage() == f"Order {order_id} paid"]
    assert len(paid) == 1
    assert paid[0].order_id == order_id
    assert paid[0].office_id == office.id
