"""Database engine and per-request sessions.

The engine is created on first use rather than at import, so importing the
app (tests, OpenAPI export) never needs a database driver connection.
"""

from collections.abc import AsyncGenerator
from functools import cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from gathevent_api.config import settings


@cache
def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first call."""
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
        echo=settings.db_echo,
        # asyncpg driver options, passed directly to asyncpg.connect()
        connect_args={"command_timeout": settings.db_statement_timeout},
    )


@cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attribute access after commit must not trigger sync I/O
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a database session per request.

    Commits on success, rolls back on exception. Route handlers never call
    commit() or rollback() directly.
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def shutdown() -> None:
    """Close all pooled connections if the engine was ever created."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
