"""Shared fixtures: a throwaway SQLite database behind the real app."""
import os
import tempfile
from uuid import uuid4

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="inkwell-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inkwell.db.base import Base
from inkwell.db.session import get_db
from inkwell.main import app


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'inkwell.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def make_user_payload(prefix: str) -> dict[str, str]:
    suffix = uuid4().hex[:8]
    return {
        "username": f"{prefix}_{suffix}",
        "email": f"{prefix}_{suffix}@inkwell.io",
        "password": "Sup3rSecret!",
    }


class Poet:
    """A registered user plus the bearer header for their requests."""

    def __init__(self, payload: dict, token_response: dict):
        self.payload = payload
        self.id = token_response["user"]["id"]
        self.username = token_response["user"]["username"]
        self.token = token_response["access_token"]
        self.refresh_token = token_response["refresh_token"]
        self.headers = {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def register(async_client: AsyncClient):
    async def _register(prefix: str = "poet") -> Poet:
        payload = make_user_payload(prefix)
        response = await async_client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return Poet(payload, response.json())

    return _register


@pytest.fixture
def write_poem(async_client: AsyncClient):
    async def _write(poet: Poet, **fields) -> dict:
        data = {
            "title": "Untitled",
            "content": "A line\nAnother line",
            "category": "free-verse",
            "tags": "",
        }
        data.update(fields)
        response = await async_client.post("/api/v1/poems", data=data, headers=poet.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _write
