import io
from dataclasses import dataclass

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.api.core.config import settings
from app.api.core.logger import setup_logging

# Logging is configured once per process, before main.py gets the chance.
# Set TEST_LOG=true to see the records, otherwise they go to a sink.
setup_logging(level="DEBUG", stream=None if settings.TEST_LOG else io.StringIO())

from app.api.db.database import build_engine, create_tables  # noqa: E402
from main import create_app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@dataclass
class TestApp:
    __test__ = False

    address: str
    client: AsyncClient
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    async def post_subscriptions(self, body: str):
        return await self.client.post(
            "/subscriptions",
            content=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )


@pytest_asyncio.fixture
async def spawn_app():
    """
    Start an application backed by its own throwaway in-memory database.

    Every test gets a fresh engine, so rows written by one test are never
    visible to another.
    """
    engine = build_engine(TEST_DATABASE_URL)
    await create_tables(engine)

    app = create_app(engine)
    address = "http://testserver"

    async with AsyncClient(transport=ASGITransport(app=app), base_url=address) as client:
        yield TestApp(
            address=address,
            client=client,
            engine=engine,
            session_factory=app.state.session_factory,
        )

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(spawn_app):
    """Session bound to the same database the spawned app writes to."""
    async with spawn_app.session_factory() as session:
        yield session
