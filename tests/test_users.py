"""Tests for profiles, stats and the follow toggle."""
from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_follow_toggle(async_client: AsyncClient, register):
    alice = await register("alice")
    bob = await register("bob")
    url = f"/api/v1/users/{bob.id}/follow"

    first = await async_client.post(url, headers=alice.headers)
    assert first.status_code == 200
    assert first.json() == {"following": True, "followers_count": 1}

    profile = await async_client.get(f"/api/v1/users/{bob.id}", headers=alice.headers)
    assert profile.json()["followers_count"] == 1
    assert profile.json()["is_following"] is True
    alice_profile = await async_client.get(f"/api/v1/users/{alice.id}")
    assert alice_profile.json()["following_count"] == 1

    followers = await async_client.get(f"/api/v1/users/{bob.id}/followers")
    assert [u["id"] for u in followers.json()] == [alice.id]
    following = await async_client.get(f"/api/v1/users/{alice.id}/following")
    assert [u["id"] for u in following.json()] == [bob.id]

    # second call unfollows
    second = await async_client.post(url, headers=alice.headers)
    assert second.json() == {"following": False, "followers_count": 0}

    profile = await async_client.get(f"/api/v1/users/{bob.id}", headers=alice.headers)
    assert profile.json()["followers_count"] == 0
    assert profile.json()["is_following"] is False
    assert (await async_client.get(f"/api/v1/users/{alice.id}/following")).json() == []


@pytest.mark.asyncio
async def test_cannot_follow_yourself(async_client: AsyncClient, register):
    alice = await register("alice")
    response = await async_client.post(f"/api/v1/users/{alice.id}/follow", headers=alice.headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot follow yourself"}

    profile = await async_client.get(f"/api/v1/users/{alice.id}")
    assert profile.json()["followers_count"] == 0
    assert profile.json()["following_count"] == 0


@pytest.mark.asyncio
async def test_follow_unknown_user(async_client: AsyncClient, register):
    alice = await register("alice")
    response = await async_client.post(f"/api/v1/users/{uuid4()}/follow", headers=alice.headers)
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}

    anonymous = await async_client.post(f"/api/v1/users/{alice.id}/follow")
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_profile_hides_email_from_others(async_client: AsyncClient, register):
    alice = await register("alice")
    bob = await register("bob")

    own = await async_client.get(f"/api/v1/users/{alice.id}", headers=alice.headers)
    assert own.json()["email"] == alice.payload["email"]
    assert own.json()["is_following"] is False

    other = await async_client.get(f"/api/v1/users/{alice.id}", headers=bob.headers)
    assert other.json()["email"] is None
    assert other.json()["username"] == alice.username

    missing = await async_client.get(f"/api/v1/users/{uuid4()}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_user_poems_and_stats(async_client: AsyncClient, register, write_poem):
    alice = await register("alice")
    bob = await register("bob")
    older = await write_poem(alice, title="Older")
    newer = await write_poem(alice, title="Newer")
    await write_poem(bob, title="Not Alice's")

    await async_client.post(f"/api/v1/poems/{older['id']}/like", headers=bob.headers)
    await async_client.post(f"/api/v1/poems/{newer['id']}/like", headers=bob.headers)
    await async_client.post(f"/api/v1/poems/{newer['id']}/like", headers=alice.headers)
    await async_client.post(
        f"/api/v1/poems/{older['id']}/comments", json={"content": "nice"}, headers=bob.headers
    )

    poems = await async_client.get(f"/api/v1/users/{alice.id}/poems", headers=bob.headers)
    assert [p["title"] for p in poems.json()] == ["Newer", "Older"]
    assert all(p["is_liked"] for p in poems.json())

    stats = await async_client.get(f"/api/v1/users/{alice.id}/stats")
    assert stats.json() == {"total_poems": 2, "total_likes": 3, "total_comments": 1}

    empty = await async_client.get(f"/api/v1/users/{uuid4()}/stats")
    assert empty.json() == {"total_poems": 0, "total_likes": 0, "total_comments": 0}
