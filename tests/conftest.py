"""Shared test fixtures.

Every test gets its own SQLite file so state never leaks between tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.config import get_settings
from lockedin.database import close_db, create_tables, get_session, init_db
from lockedin.main import create_app
from lockedin.ws.manager import GroupBroadcaster

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point settings at a fresh SQLite file."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'lockedin-test.db'}"
    monkeypatch.setenv("LOCKEDIN_DATABASE_URL", url)
    monkeypatch.setenv("LOCKEDIN_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(database_url: str) -> AsyncGenerator[FastAPI, None]:
    """Application with an initialised schema (ASGITransport does not run lifespan)."""
    await init_db(database_url)
    await create_tables()
    application = create_app()
    yield application
    await close_db()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def broadcaster(app: FastAPI) -> GroupBroadcaster:
    return app.state.broadcaster


@pytest.fixture
def session_factory(app: FastAPI) -> SessionFactory:
    """Open short-lived sessions for direct service calls and assertions."""

    @asynccontextmanager
    async def _open() -> AsyncIterator[AsyncSession]:
        sessions = get_session()
        try:
            yield await sessions.__anext__()
        finally:
            await sessions.aclose()

    return _open


async def register(client: AsyncClient, username: str) -> dict:
    """Register a user via the API and return its JSON body."""
    response = await client.post("/api/register", json={"username": username})
    assert response.status_code == 200, response.text
    return response.json()


async def create_group(client: AsyncClient, user_id: str, name: str, sites: list[str]) -> dict:
    """Create a group via the API and return its JSON body."""
    response = await client.post("/api/groups", json={"name": name, "userId": user_id, "sites": sites})
    assert response.status_code == 200, response.text
    return response.json()


async def join(client: AsyncClient, user_id: str, code: str) -> dict:
    response = await client.post("/api/groups/join", json={"code": code, "userId": user_id})
    assert response.status_code == 200, response.text
    return response.json()
