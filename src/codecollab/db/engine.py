"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

Pool sizing only applies to PostgreSQL; SQLite (used by the test suite)
runs on SQLAlchemy's default pool for aiosqlite.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from codecollab.config import settings

_engine_kwargs = {"echo": settings.debug}
if not settings.is_sqlite:
    # Connection pool: min 5, max 20 connections.
    _engine_kwargs.update(pool_size=5, max_overflow=15)

engine = create_async_engine(settings.database_url, **_engine_kwargs)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
