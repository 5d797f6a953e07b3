"""Visitor video calls: signaling state only, media is peer-to-peer."""
import pytest

from desktown.db.models import Notification, VideoCall

VISITOR_SESSION = "visitor-session-0001"


@pytest.fixture
def staffed(make_user, make_office, make_client):
    owner = make_user()
    office = make_office(owner)
    return office, owner, make_client(owner)


async def _request_call(client, office_id: int) -> dict:
    res = await client.post(
        f"/api/public/offices/{office_id}/video-calls",
        json={"session_id": VISITOR_SESSION, "visitor_name": "Grace"},
    )
    assert res.status_code == 201
    return res.json()


@pytest.mark.asyncio
async def test_call_lifecycle(staffed, client, db):
    office, owner, owner_client = staffed
    created = await _request_call(client, office.id)
    assert created["status"] == "pending"
    assert created["room_id"].startswith("room_")
    assert "session_id" not in created

    [note] = db.query(Notification).filter(Notification.user_id == owner.id).all()
    assert note.data["room_id"] == created["room_id"]

    calls = (await owner_client.get(f"/api/offices/{office.id}/video-calls")).json()
    assert [c["room_id"] for c in calls] == [created["room_id"]]
    call_id = calls[0]["id"]

    accepted = await owner_client.post(f"/api/offices/{office.id}/video-calls/{call_id}/accept")
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "active"
    assert accepted.json()["receptionist_id"] == str(owner.id)
    assert accepted.json()["started_at"] is not None

    polled = await client.get(f"/api/public/video-calls/{created['room_id']}")
    assert polled.json()["status"] == "active"

    ended = await owner_client.post(f"/api/offices/{office.id}/video-calls/{call_id}/end")
    assert ended.json()["status"] == "ended"
    assert ended.json()["ended_at"] is not None


@pytest.mark.asyncio
async def test_decline_then_accept_is_rejected(staffed, client, db):
    office, _, owner_client = staffed
    await _request_call(client, office.id)
    call = db.query(VideoCall).one()

    declined = await owner_client.post(f"/api/offices/{office.id}/video-calls/{call.id}/decline")
    assert declined.json()["status"] == "declined"

    accept = await owner_client.post(f"/api/offices/{office.id}/video-calls/{call.id}/accept")
    assert accept.status_code == 400


@pytest.mark.asyncio
async def test_cannot_end_pending_call_as_receptionist(staffed, client, db):
    office, _, owner_client = staffed
    await _request_call(client, office.id)
    call = db.query(VideoCall).one()

    res = await owner_client.post(f"/api/offices/{office.id}/video-calls/{call.id}/end")
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_filter_by_status(staffed, client, db):
    office, _, owner_client = staffed
    await _request_call(client, office.id)
    await _request_call(client, office.id)
    first = db.query(VideoCall).order_by(VideoCall.id).first()
    await owner_client.post(f"/api/offices/{office.id}/video-calls/{first.id}/decline")

    pending = (
        await owner_client.get(f"/api/offices/{office.id}/video-calls", params={"status": "pending"})
    ).json()
    assert len(pending) == 1
    assert pending[0]["id"] != first.id


@pytest.mark.asyncio
async def test_visitor_end_requires_own_session(staffed, client):
    office, _, _ = staffed
    created = await _request_call(client, office.id)
    room_id = created["room_id"]

    wrong = await client.post(
        f"/api/public/video-calls/{room_id}/end", json={"session_id": "someone-else-123"}
    )
    assert wrong.status_code == 403

    ended = await client.post(
        f"/api/public/video-calls/{room_id}/end", json={"session_id": VISITOR_SESSION}
    )
    assert ended.status_code == 200
    assert ended.json()["status"] == "ended"


@pytest.mark.asyncio
async def test_room_id_format_and_lookup(client):
    bad = await client.get("/api/public/video-calls/not-a-room")
    assert bad.status_code == 400

    missing = await client.get(f"/api/public/video-calls/room_{'0' * 32}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_outsider_cannot_answer_calls(staffed, client, make_user, make_client, db):
    office, _, _ = staffed
    await _request_call(client, office.id)
    call = db.query(VideoCall).one()
    outsider = make_client(make_user())

    res = await outsider.post(f"/api/offices/{office.id}/video-calls/{call.id}/accept")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_unpublished_office_takes_no_calls(make_user, make_office, client):
    office = make_office(make_user(), approved=False)
    res = await client.post(
        f"/api/public/offices/{office.id}/video-calls", json={"session_id": VISITOR_SESSION}
    )
    assert res.status_code == 404


def test_room_id_rejects_trailing_newline():
    from desktown.services import video_call_service

    room_id = video_call_service.generate_room_id()
    assert video_call_service.is_valid_room_id(room_id)
    assert not video_call_service.is_valid_room_id(room_id + "\n")
    assert not video_call_service.is_valid_room_id(room_id.upper())
