"""Web Push subscriptions and delivery."""
from types import SimpleNamespace

import pytest

from desktown.core.config import settings
from desktown.db.enums import NotificationType
from desktown.db.models import PushSubscription
from desktown.services import notification_service, push_service


@pytest.fixture
def vapid_keys(monkeypatch):
    monkeypatch.setattr(settings, "VAPID_PUBLIC_KEY", "BPublicKeyForTests")
    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "private-key-for-tests")


def _subscription(endpoint: str, p256dh: str = "p256dh-key", auth: str = "auth-secret") -> dict:
    return {"endpoint": endpoint, "keys": {"p256dh": p256dh, "auth": auth}}


def _add_subscription(db, user, endpoint: str) -> PushSubscription:
    return push_service.upsert_subscription(db, user.id, endpoint, "p256dh-key", "auth-secret")


@pytest.mark.asyncio
async def test_vapid_key_unavailable_until_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "VAPID_PUBLIC_KEY", "")
    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "")
    res = await client.get("/api/push/vapid-public-key")
    assert res.status_code == 503


@pytest.mark.asyncio
async def test_vapid_key_returned_when_configured(client, vapid_keys):
    res = await client.get("/api/push/vapid-public-key")
    assert res.status_code == 200
    assert res.json() == {"public_key": "BPublicKeyForTests"}


@pytest.mark.asyncio
async def test_subscribe_upserts_by_endpoint(make_client, make_user, db):
    alice, bob = make_user(), make_user()
    endpoint = "https://push.example.test/send/abc"

    first = await make_client(alice).post("/api/push/subscribe", json=_subscription(endpoint))
    assert first.status_code == 201

    # Same browser endpoint re-registered by another account moves to that account
    second = await make_client(bob).post(
        "/api/push/subscribe", json=_subscription(endpoint, p256dh="rotated-key")
    )
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    [sub] = db.query(PushSubscription).all()
    db.refresh(sub)
    assert sub.user_id == bob.id
    assert sub.p256dh == "rotated-key"


@pytest.mark.asyncio
async def test_unsubscribe_is_scoped_to_caller(make_client, make_user, db):
    alice, bob = make_user(), make_user()
    endpoint = "https://push.example.test/send/def"
    alice_client = make_client(alice)
    await alice_client.post("/api/push/subscribe", json=_subscription(endpoint))

    other = await make_client(bob).post("/api/push/unsubscribe", json={"endpoint": endpoint})
    assert other.json() == {"removed": False}
    assert db.query(PushSubscription).count() == 1

    own = await alice_client.post("/api/push/unsubscribe", json={"endpoint": endpoint})
    assert own.json() == {"removed": True}
    assert db.query(PushSubscription).count() == 0


@pytest.mark.asyncio
async def test_subscribe_requires_csrf(make_client, test_user):
    res = await make_client(test_user, csrf=False).post(
        "/api/push/subscribe", json=_subscription("https://push.example.test/send/x")
    )
    assert res.status_code == 403


def test_gone_subscriptions_are_pruned(test_user, db, vapid_keys, monkeypatch):
    gone = _add_subscription(db, test_user, "https://push.example.test/gone")
    flaky = _add_subscription(db, test_user, "https://push.example.test/flaky")
    healthy = _add_subscription(db, test_user, "https://push.example.test/healthy")
    gone_id, flaky_id, healthy_id = gone.id, flaky.id, healthy.id
    delivered = []

    def fake_deliver(subscription, payload):
        if subscription.id == gone_id:
            raise push_service.PushGone("410")
        if subscription.id == flaky_id:
            raise RuntimeError("gateway timeout")
        delivered.append(subscription.id)

    monkeypatch.setattr(push_service, "_deliver", fake_deliver)
    notification = notification_service.create_notification(
        db, user_id=test_user.id, type=NotificationType.NEW_MESSAGE, title="Hello"
    )

    assert delivered == [healthy_id]
    remaining = {s.id for s in db.query(PushSubscription).all()}
    assert remaining == {flaky_id, healthy_id}
    assert notification.id is not None


def test_send_skipped_without_vapid_keys(test_user, db, monkeypatch):
    monkeypatch.setattr(settings, "VAPID_PUBLIC_KEY", "")
    _add_subscription(db, test_user, "https://push.example.test/one")

    def fail_deliver(subscription, payload):
        raise AssertionError("push should be disabled")

    monkeypatch.setattr(push_service, "_deliver", fail_deliver)
    notification = notification_service.create_notification(
        db, user_id=test_user.id, type=NotificationType.NEW_MESSAGE, title="Quiet"
    )
    assert push_service.send_to_user(db, notification) == 0


def test_deliver_bounds_the_request(test_user, db, vapid_keys, monkeypatch):
    import pywebpush

    calls = []

    def fake_webpush(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(pywebpush, "webpush", fake_webpush)
    monkeypatch.setattr(settings, "PUSH_TIMEOUT_SECONDS", 3.5)
    sub = _add_subscription(db, test_user, "https://push.example.test/timeout")

    push_service._deliver(sub, "{}")

    [call] = calls
    assert call["timeout"] == 3.5
    assert call["subscription_info"]["endpoint"] == sub.endpoint


def test_deliver_maps_410_to_gone(test_user, db, vapid_keys, monkeypatch):
    import pywebpush

    def expired(**kwargs):
        raise pywebpush.WebPushException("expired", response=SimpleNamespace(status_code=410))

    monkeypatch.setattr(pywebpush, "webpush", expired)
    sub = _add_subscription(db, test_user, "https://push.example.test/expired")

    with pytest.raises(push_service.PushGone):
        push_service._deliver(sub, "{}")
