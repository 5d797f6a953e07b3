"""Tests for chat threads, messages and read markers."""
import pytest

from desktown.db.enums import Role


async def _thread_unread(client, thread_id: int) -> int:
    threads = (await client.get("/api/threads")).json()
    return next(t["unread_count"] for t in threads if t["id"] == thread_id)


@pytest.mark.asyncio
async def test_mark_read_is_idempotent_and_per_user(make_client, make_user):
    alice, bob, carol = make_user(), make_user(), make_user()
    alice_client, bob_client, carol_client = make_client(alice), make_client(bob), make_client(carol)

    created = await alice_client.post(
        "/api/threads",
        json={"name": "Front desk", "participant_ids": [str(bob.id), str(carol.id)]},
    )
    assert created.status_code == 201
    thread_id = created.json()["id"]

    for text in ("hello", "anyone here?"):
        res = await alice_client.post(f"/api/threads/{thread_id}/messages", json={"content": text})
        assert res.status_code == 201

    assert await _thread_unread(bob_client, thread_id) == 2
    assert await _thread_unread(carol_client, thread_id) == 2
    # Own messages never count as unread
    assert await _thread_unread(alice_client, thread_id) == 0

    first = await bob_client.post(f"/api/threads/{thread_id}/read")
    assert first.status_code == 200
    assert first.json()["unread_count"] == 0
    second = await bob_client.post(f"/api/threads/{thread_id}/read")
    assert second.json() == first.json()

    assert await _thread_unread(bob_client, thread_id) == 0
    assert await _thread_unread(carol_client, thread_id) == 2


@pytest.mark.asyncio
async def test_direct_thread_is_reused(make_client, make_user):
    alice, bob = make_user(), make_user()
    alice_client, bob_client = make_client(alice), make_client(bob)

    first = await alice_client.post("/api/threads/direct", json={"user_id": str(bob.id)})
    assert first.status_code == 201
    again = await bob_client.post("/api/threads/direct", json={"user_id": str(alice.id)})
    assert again.status_code == 200
    assert again.json()["id"] == first.json()["id"]
    assert again.json()["type"] == "direct"


@pytest.mark.asyncio
async def test_non_participant_cannot_read_messages(make_client, make_user):
    alice, outsider = make_user(), make_user()
    thread = (await make_client(alice).post("/api/threads", json={"name": "Private"})).json()

    response = await make_client(outsider).get(f"/api/threads/{thread['id']}/messages")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_last_message_and_sender_delete(make_client, make_user):
    alice, bob = make_user(), make_user(Role.MEMBER)
    alice_client, bob_client = make_client(alice), make_client(bob)
    thread = (await alice_client.post(
        "/api/threads", json={"name": "Ops", "participant_ids": [str(bob.id)]}
    )).json()

    first = (await alice_client.post(f"/api/threads/{thread['id']}/messages", json={"content": "one"})).json()
    second = (await alice_client.post(f"/api/threads/{thread['id']}/messages", json={"content": "two"})).json()

    threads = (await bob_client.get("/api/threads")).json()
    assert threads[0]["last_message"]["content"] == "two"

    forbidden = await bob_client.delete(f"/api/threads/{thread['id']}/messages/{second['id']}")
    assert forbidden.status_code == 403

    deleted = await alice_client.delete(f"/api/threads/{thread['id']}/messages/{second['id']}")
    assert deleted.status_code == 204
    threads = (await bob_client.get("/api/threads")).json()
    assert threads[0]["last_message"]["id"] == first["id"]
