"""Tests for comment creation and one-level reply threading."""
from uuid import uuid4

import pytest
from httpx import AsyncClient


async def _comment(client: AsyncClient, poem_id: str, poet, content: str, parent_id: str | None = None):
    payload = {"content": content}
    if parent_id:
        payload["parent_id"] = parent_id
    return await client.post(f"/api/v1/poems/{poem_id}/comments", json=payload, headers=poet.headers)


@pytest.mark.asyncio
async def test_replies_nest_one_level_in_creation_order(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    reader = await register("reader")
    poem = await write_poem(author)

    first = (await _comment(async_client, poem["id"], reader, "first!")).json()
    second = (await _comment(async_client, poem["id"], author, "second")).json()
    reply_a = await _comment(async_client, poem["id"], author, "thank you", parent_id=first["id"])
    reply_b = await _comment(async_client, poem["id"], reader, "you're welcome", parent_id=first["id"])

    assert reply_a.status_code == 201
    assert reply_a.json()["parent_id"] == first["id"]
    assert reply_a.json()["replies"] == []
    assert reply_a.json()["author"]["username"] == author.username

    response = await async_client.get(f"/api/v1/poems/{poem['id']}/comments")
    assert response.status_code == 200
    threads = response.json()
    assert [c["id"] for c in threads] == [first["id"], second["id"]]
    assert all(c["parent_id"] is None for c in threads)
    assert [r["content"] for r in threads[0]["replies"]] == ["thank you", "you're welcome"]
    assert [r["id"] for r in threads[0]["replies"]] == [reply_a.json()["id"], reply_b.json()["id"]]
    assert all(r["replies"] == [] for r in threads[0]["replies"])
    assert threads[0]["replies"][1]["author"]["username"] == reader.username
    assert threads[1]["replies"] == []


@pytest.mark.asyncio
async def test_comments_count_increments_for_comments_and_replies(
    async_client: AsyncClient, register, write_poem
):
    author = await register("author")
    poem = await write_poem(author)

    top = (await _comment(async_client, poem["id"], author, "top")).json()
    await _comment(async_client, poem["id"], author, "reply", parent_id=top["id"])

    response = await async_client.get(f"/api/v1/poems/{poem['id']}")
    assert response.json()["comments_count"] == 2


@pytest.mark.asyncio
async def test_cannot_reply_to_a_reply(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    poem = await write_poem(author)
    top = (await _comment(async_client, poem["id"], author, "top")).json()
    reply = (await _comment(async_client, poem["id"], author, "reply", parent_id=top["id"])).json()

    nested = await _comment(async_client, poem["id"], author, "deeper", parent_id=reply["id"])
    assert nested.status_code == 400
    assert nested.json() == {"error": "Cannot reply to a reply"}

    response = await async_client.get(f"/api/v1/poems/{poem['id']}")
    assert response.json()["comments_count"] == 2


@pytest.mark.asyncio
async def test_parent_must_belong_to_poem(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    poem = await write_poem(author)
    elsewhere = await write_poem(author, title="Elsewhere")
    foreign = (await _comment(async_client, elsewhere["id"], author, "over here")).json()

    response = await _comment(async_client, poem["id"], author, "reply", parent_id=foreign["id"])
    assert response.status_code == 404
    assert response.json() == {"error": "Comment not found"}

    unknown = await _comment(async_client, poem["id"], author, "reply", parent_id=str(uuid4()))
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_comment_validation_and_auth(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    poem = await write_poem(author)

    anonymous = await async_client.post(f"/api/v1/poems/{poem['id']}/comments", json={"content": "hi"})
    assert anonymous.status_code == 401

    blank = await _comment(async_client, poem["id"], author, "   ")
    assert blank.status_code == 400
    assert "content" in blank.json()["error"]

    missing_poem = await _comment(async_client, str(uuid4()), author, "hello?")
    assert missing_poem.status_code == 404
    assert missing_poem.json() == {"error": "Poem not found"}

    listing = await async_client.get(f"/api/v1/poems/{uuid4()}/comments")
    assert listing.status_code == 404


@pytest.mark.asyncio
async def test_reply_accepts_camel_case_parent_key(async_client: AsyncClient, register, write_poem):
    author = await register("author")
    reader = await register("reader")
    poem = await write_poem(author)
    top = (await _comment(async_client, poem["id"], reader, "top")).json()

    reply = await async_client.post(
        f"/api/v1/poems/{poem['id']}/comments",
        json={"content": "reply", "parentId": top["id"]},
        headers=author.headers,
    )
    assert reply.status_code == 201
    assert reply.json()["parent_id"] == top["id"]

    threads = (await async_client.get(f"/api/v1/poems/{poem['id']}/comments")).json()
    assert [(c["content"], len(c["replies"])) for c in threads] == [("top", 1)]
    assert threads[0]["replies"][0]["content"] == "reply"
