"""Async engine and sessions.

HTTP requests take one session each for the length of the request. Websocket
channels never hold a session; their join lookup opens a short one from
``async_session_factory`` and returns the connection straight away, so the
pool is sized for concurrent requests, not for open sockets.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the DDL-mirror ORM models (users, orders, notifications)."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
    # Checked on checkout; stale connections are replaced, not handed out
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Per-request session; services own commit/rollback, this only closes it."""
    async with async_session_factory() as session:
        yield session
