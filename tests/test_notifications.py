"""Notification listing and read markers."""
import pytest

from desktown.db.enums import NotificationType
from desktown.services import notification_service


def _notify(db, user, title):
    return notification_service.create_notification(
        db, user_id=user.id, type=NotificationType.NEW_MESSAGE, title=title
    )


@pytest.mark.asyncio
async def test_read_all_clears_unread(authed_client, test_user, make_user, db):
    other = make_user()
    for i in range(3):
        _notify(db, test_user, f"Ping {i}")
    _notify(db, other, "Not yours")

    assert (await authed_client.get("/api/notifications/unread-count")).json() == {"count": 3}

    response = await authed_client.post("/api/notifications/read-all")
    assert response.status_code == 200
    assert response.json() == {"marked_read": 3}
    assert (await authed_client.get("/api/notifications/unread-count")).json() == {"count": 0}

    again = await authed_client.post("/api/notifications/read-all")
    assert again.json() == {"marked_read": 0}

    assert notification_service.get_unread_count(db, other.id) == 1


@pytest.mark.asyncio
async def test_mark_single_read_is_scoped(authed_client, make_user, db):
    other = make_user()
    theirs = _notify(db, other, "Private")
    response = await authed_client.patch(f"/api/notifications/{theirs.id}/read")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_listing_is_newest_first(authed_client, test_user, db):
    _notify(db, test_user, "older")
    newer = _notify(db, test_user, "newer")
    items = (await authed_client.get("/api/notifications")).json()
    assert items[0]["id"] == newer.id
    assert (await authed_client.get("/api/notifications", params={"unread_only": True})).json()


@pytest.mark.asyncio
async def test_push_failure_does_not_break_notification(test_user, db, monkeypatch):
    from desktown.services import push_service

    def boom(*args, **kwargs):
        raise RuntimeError("push gateway down")

    monkeypatch.setattr(push_service, "send_to_user", boom)
    notification = _notify(db, test_user, "Still stored")
    assert notification.id is not None
