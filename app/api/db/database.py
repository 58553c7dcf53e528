from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.api.core.config import settings

BASE_DIR = Path(__file__).resolve().parent

DB_TYPE = settings.DB_TYPE


def get_db_url(test_mode: bool = False) -> str:
    """
    Constructs and returns the database URL for async SQLModel engines.
    """
    if test_mode:
        return "sqlite+aiosqlite://"

    if DB_TYPE == "sqlite":
        return f"sqlite+aiosqlite:///{BASE_DIR / settings.DB_SQLITE_PATH}"

    return settings.connection_string()


def build_engine(url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """
    Create the pooled async engine shared by every request handler.

    In-memory SQLite gets a StaticPool so all sessions see the same database;
    file-backed SQLite keeps SQLAlchemy's default pool; anything else is sized
    from ``DB_POOL_SIZE``.
    """
    url = url or get_db_url()
    options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}

    if url.startswith("sqlite"):
        if url.rstrip("/").endswith("sqlite+aiosqlite:") or ":memory:" in url:
            options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.DB_POOL_SIZE

    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()

Base = SQLModel


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Yield a session from the factory attached to the running application.

    Handlers own their commits; anything that escapes the handler is rolled back.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory

    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
