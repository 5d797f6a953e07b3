"""Internal email folders, drafts and unread counts."""
import pytest


async def _send(client, recipient, subject="Hello", **extra):
    response = await client.post(
        "/api/emails",
        json={"recipient_id": str(recipient.id), "subject": subject, "body": "Body text", **extra},
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_folders_and_unread_count(make_client, make_user):
    alice, bob = make_user(), make_user()
    alice_client, bob_client = make_client(alice), make_client(bob)

    first = await _send(alice_client, bob, "Quarterly report")
    await _send(alice_client, bob, "Lunch?")
    draft = await _send(alice_client, bob, "Unfinished", is_draft=True)

    inbox = (await bob_client.get("/api/emails/inbox")).json()
    assert {e["subject"] for e in inbox} == {"Quarterly report", "Lunch?"}
    assert (await bob_client.get("/api/emails/unread-count")).json() == {"count": 2}

    sent = (await alice_client.get("/api/emails/sent")).json()
    assert len(sent) == 2
    drafts = (await alice_client.get("/api/emails/drafts")).json()
    assert [e["id"] for e in drafts] == [draft["id"]]

    opened = await bob_client.get(f"/api/emails/{first['id']}")
    assert opened.json()["is_read"] is True
    assert (await bob_client.get("/api/emails/unread-count")).json() == {"count": 1}

    # Recipients never see drafts
    assert (await bob_client.get(f"/api/emails/{draft['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_star_and_archive(make_client, make_user):
    alice, bob = make_user(), make_user()
    bob_client = make_client(bob)
    email = await _send(make_client(alice), bob)

    starred = await bob_client.post(f"/api/emails/{email['id']}/star")
    assert starred.json()["is_starred"] is True
    assert len((await bob_client.get("/api/emails/starred")).json()) == 1

    await bob_client.post(f"/api/emails/{email['id']}/archive")
    assert (await bob_client.get("/api/emails/inbox")).json() == []
    assert len((await bob_client.get("/api/emails/archived")).json()) == 1


@pytest.mark.asyncio
async def test_sending_a_draft_notifies(make_client, make_user, db):
    from desktown.db.models import Notification

    alice, bob = make_user(), make_user()
    alice_client = make_client(alice)
    draft = await _send(alice_client, bob, is_draft=True)
    assert db.query(Notification).filter(Notification.user_id == bob.id).count() == 0

    sent = await alice_client.patch(f"/api/emails/{draft['id']}", json={"is_draft": False})
    assert sent.status_code == 200
    assert sent.json()["is_draft"] is False
    assert db.query(Notification).filter(
        Notification.user_id == bob.id, Notification.type == "new_email"
    ).count() == 1

    again = await alice_client.patch(f"/api/emails/{draft['id']}", json={"subject": "Edited"})
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_unknown_recipient(authed_client):
    response = await authed_client.post(
        "/api/emails",
        json={"recipient_id": "00000000-0000-0000-0000-000000000000", "subject": "x", "body": ""},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_recipient_marks_read(make_client, make_user):
    alice, bob = make_user(), make_user()
    alice_client = make_client(alice)
    email = await _send(alice_client, bob)
    assert (await alice_client.post(f"/api/emails/{email['id']}/read")).status_code == 403
    assert (await make_client(bob).post(f"/api/emails/{email['id']}/read")).status_code == 200


@pytest.mark.asyncio
async def test_delete_hides_email_from_every_folder(make_client, make_user):
    alice, bob = make_user(), make_user()
    alice_client, bob_client = make_client(alice), make_client(bob)
    email = await _send(alice_client, bob)
    kept = await _send(alice_client, bob, "Still here")

    response = await alice_client.delete(f"/api/emails/{email['id']}")
    assert response.status_code == 204

    assert [e["id"] for e in (await alice_client.get("/api/emails/sent")).json()] == [kept["id"]]
    assert [e["id"] for e in (await bob_client.get("/api/emails/inbox")).json()] == [kept["id"]]
    assert (await alice_client.get(f"/api/emails/{email['id']}")).status_code == 404
    assert (await bob_client.get(f"/api/emails/{email['id']}")).status_code == 404
    assert (await bob_client.delete(f"/api/emails/{email['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_requires_a_party(make_client, make_user):
    alice, bob = make_user(), make_user()
    email = await _send(make_client(alice), bob)
    response = await make_client(make_user()).delete(f"/api/emails/{email['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reply_links_to_a_visible_parent(make_client, make_user):
    alice, bob, carol = make_user(), make_user(), make_user()
    alice_client, bob_client = make_client(alice), make_client(bob)
    original = await _send(alice_client, bob, "Question")

    reply = await _send(bob_client, alice, "Re: Question", parent_email_id=original["id"])
    assert reply["parent_email_id"] == original["id"]

    missing = await bob_client.post(
        "/api/emails",
        json={"recipient_id": str(alice.id), "subject": "Re", "body": "", "parent_email_id": 999999},
    )
    assert missing.status_code == 404

    outsider = await make_client(carol).post(
        "/api/emails",
        json={"recipient_id": str(alice.id), "subject": "Re", "body": "", "parent_email_id": original["id"]},
    )
    assert outsider.status_code == 404
