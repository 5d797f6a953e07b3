"""Social feed: profiles, follows, posts, likes and comments."""
import pytest


@pytest.mark.asyncio
async def test_profile_created_on_first_access(authed_client, test_user):
    first = await authed_client.get("/api/profile")
    assert first.status_code == 200
    assert first.json()["owner_id"] == str(test_user.id)
    assert first.json()["display_name"] == "Test User"

    again = await authed_client.get("/api/profile")
    assert again.json()["id"] == first.json()["id"]


@pytest.mark.asyncio
async def test_update_profile_blank_clears(authed_client):
    await authed_client.patch("/api/profile", json={"bio": "Hello", "location": "Riyadh"})
    res = await authed_client.patch("/api/profile", json={"bio": "   "})
    assert res.json()["bio"] is None
    assert res.json()["location"] == "Riyadh"


@pytest.mark.asyncio
async def test_follow_rules(authed_client, make_user, make_client):
    other_client = make_client(make_user())
    profile_id = (await other_client.get("/api/profile")).json()["id"]
    own_id = (await authed_client.get("/api/profile")).json()["id"]

    assert (await authed_client.post(f"/api/profile/{own_id}/follow")).status_code == 400

    followed = await authed_client.post(f"/api/profile/{profile_id}/follow")
    assert followed.json() == {"is_following": True, "followers": 1}
    assert (await authed_client.post(f"/api/profile/{profile_id}/follow")).status_code == 400

    status = (await authed_client.get(f"/api/profile/{profile_id}/following")).json()
    assert status["is_following"] is True

    unfollowed = await authed_client.delete(f"/api/profile/{profile_id}/follow")
    assert unfollowed.json() == {"is_following": False, "followers": 0}
    assert (await authed_client.delete(f"/api/profile/{profile_id}/follow")).status_code == 404


@pytest.mark.asyncio
async def test_post_like_is_idempotent(authed_client, make_user, make_client):
    post = (await authed_client.post("/api/posts", json={"content": "First post"})).json()
    assert post["like_count"] == 0
    assert post["author_name"] == "Test User"

    fan = make_client(make_user())
    first = await fan.post(f"/api/posts/{post['id']}/like")
    second = await fan.post(f"/api/posts/{post['id']}/like")
    assert first.json() == {"likes": 1, "is_liked": True}
    assert second.json() == {"likes": 1, "is_liked": True}

    feed = (await fan.get("/api/posts")).json()
    assert feed[0]["is_liked"] is True
    assert feed[0]["like_count"] == 1

    unliked = await fan.delete(f"/api/posts/{post['id']}/like")
    assert unliked.json() == {"likes": 0, "is_liked": False}


@pytest.mark.asyncio
async def test_profile_scoped_posts_stay_off_feed(authed_client, test_user):
    await authed_client.post("/api/posts", json={"content": "Everyone"})
    await authed_client.post("/api/posts", json={"content": "Just my page", "scope": "profile"})

    feed = (await authed_client.get("/api/posts")).json()
    assert [p["content"] for p in feed] == ["Everyone"]

    profile_id = (await authed_client.get("/api/profile")).json()["id"]
    mine = (await authed_client.get(f"/api/profile/{profile_id}/posts")).json()
    assert {p["content"] for p in mine} == {"Everyone", "Just my page"}


@pytest.mark.asyncio
async def test_bad_scope_rejected(authed_client):
    res = await authed_client.post("/api/posts", json={"content": "x", "scope": "friends"})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_comments_and_author_only_delete(authed_client, make_user, make_client):
    post = (await authed_client.post("/api/posts", json={"content": "Discuss"})).json()
    other = make_client(make_user())

    comment = await other.post(f"/api/posts/{post['id']}/comments", json={"content": "Nice"})
    assert comment.status_code == 201
    comment_id = comment.json()["id"]

    listed = (await authed_client.get(f"/api/posts/{post['id']}/comments")).json()
    assert [c["content"] for c in listed] == ["Nice"]

    denied = await authed_client.delete(f"/api/posts/{post['id']}/comments/{comment_id}")
    assert denied.status_code == 403
    ok = await other.delete(f"/api/posts/{post['id']}/comments/{comment_id}")
    assert ok.status_code == 204


@pytest.mark.asyncio
async def test_only_author_deletes_post(authed_client, make_user, make_client):
    post = (await authed_client.post("/api/posts", json={"content": "Mine"})).json()
    other = make_client(make_user())
    assert (await other.delete(f"/api/posts/{post['id']}")).status_code == 403
    assert (await authed_client.delete(f"/api/posts/{post['id']}")).status_code == 204
    assert (await authed_client.get(f"/api/posts/{post['id']}/comments")).status_code == 404


@pytest.mark.asyncio
async def test_profile_stats(authed_client, make_user, make_client):
    post = (await authed_client.post("/api/posts", json={"content": "Count me"})).json()
    profile_id = (await authed_client.get("/api/profile")).json()["id"]

    fan = make_client(make_user())
    await fan.post(f"/api/posts/{post['id']}/like")
    await fan.post(f"/api/profile/{profile_id}/follow")

    stats = (await authed_client.get(f"/api/profile/{profile_id}/stats")).json()
    assert stats == {"posts": 1, "followers": 1, "following": 0, "likes": 1}
