"""Tests for the like toggle and likes_count upkeep."""
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select, update

from inkwell.models import Like, Poem
from inkwell.services.poem_service import find_likes_count_drift


async def _stored_and_actual(session_maker, poem_id: str) -> tuple[int, int]:
    async with session_maker() as db:
        stored = await db.scalar(select(Poem.likes_count).where(Poem.id == UUID(poem_id)))
        actual = await db.scalar(select(func.count()).select_from(Like).where(Like.poem_id == UUID(poem_id)))
    return stored, actual


@pytest.mark.asyncio
async def test_toggle_like_twice_restores_state(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    reader = await register("reader")
    poem = await write_poem(author)
    url = f"/api/v1/poems/{poem['id']}/like"

    first = await async_client.post(url, headers=reader.headers)
    assert first.status_code == 200
    assert first.json() == {"liked": True, "likes_count": 1}
    status = await async_client.get(f"/api/v1/poems/{poem['id']}/like-status", headers=reader.headers)
    assert status.json() == {"liked": True}

    second = await async_client.post(url, headers=reader.headers)
    assert second.json() == {"liked": False, "likes_count": 0}
    status = await async_client.get(f"/api/v1/poems/{poem['id']}/like-status", headers=reader.headers)
    assert status.json() == {"liked": False}


@pytest.mark.asyncio
async def test_likes_count_tracks_likes_set(async_client: AsyncClient, register, write_poem, session_maker):
    author = await register("author")
    readers = [await register(f"reader{i}") for i in range(3)]
    poem = await write_poem(author)
    url = f"/api/v1/poems/{poem['id']}/like"

    sequence = [0, 1, 2, 1, 0, 1, 2, 2, 0]
    for index in sequence:
        response = await async_client.post(url, headers=readers[index].headers)
        stored, actual = await _stored_and_actual(session_maker, poem["id"])
        assert stored == actual == response.json()["likes_count"]

    # reader0 toggled 3 times, reader1 3 times, reader2 3 times: all end liked
    assert (await _stored_and_actual(session_maker, poem["id"])) == (3, 3)
    assert await find_likes_count_drift_ids(session_maker) == []


@pytest.mark.asyncio
async def test_poem_reports_viewer_like(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    reader = await register("reader")
    poem = await write_poem(author)
    await async_client.post(f"/api/v1/poems/{poem['id']}/like", headers=reader.headers)

    as_reader = await async_client.get(f"/api/v1/poems/{poem['id']}", headers=reader.headers)
    assert as_reader.json()["is_liked"] is True
    assert as_reader.json()["likes_count"] == 1

    as_author = await async_client.get(f"/api/v1/poems/{poem['id']}", headers=author.headers)
    assert as_author.json()["is_liked"] is False

    anonymous = await async_client.get(f"/api/v1/poems/{poem['id']}")
    assert anonymous.json()["is_liked"] is False


@pytest.mark.asyncio
async def test_like_requires_auth_and_existing_poem(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    poem = await write_poem(author)

    anonymous = await async_client.post(f"/api/v1/poems/{poem['id']}/like")
    assert anonymous.status_code == 401

    missing = await async_client.post(
        "/api/v1/poems/00000000-0000-0000-0000-000000000000/like", headers=author.headers
    )
    assert missing.status_code == 404
    assert missing.json() == {"error": "Poem not found"}


async def find_likes_count_drift_ids(session_maker) -> list[str]:
    async with session_maker() as db:
        return [str(poem.id) for poem, _ in await find_likes_count_drift(db)]


@pytest.mark.asyncio
async def test_find_likes_count_drift(async_client: AsyncClient, register, write_poem, session_maker):
    author = await register("author")
    reader = await register("reader")
    healthy = await write_poem(author, title="Healthy")
    broken = await write_poem(author, title="Broken")
    await async_client.post(f"/api/v1/poems/{healthy['id']}/like", headers=reader.headers)
    await async_client.post(f"/api/v1/poems/{broken['id']}/like", headers=reader.headers)

    async with session_maker() as db:
        await db.execute(update(Poem).where(Poem.id == UUID(broken["id"])).values(likes_count=5))
        await db.commit()

    async with session_maker() as db:
        drift = await find_likes_count_drift(db)
    assert [(str(poem.id), poem.likes_count, actual) for poem, actual in drift] == [(broken["id"], 5, 1)]
