"""Async engine and session management.

The API process shares one engine; the arq worker builds its own with a
smaller pool in its startup hook.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from thermio.config import settings


def make_engine(pool_size: int, max_overflow: int) -> AsyncEngine:
    return create_async_engine(
        settings.async_database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Transitions read the returned row after commit, so nothing expires
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = make_engine(settings.database_pool_size, settings.database_max_overflow)
async_session_factory = make_session_factory(async_engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session.

    Commits when the handler returns and rolls back on any exception, so a
    rejected transition never leaves partial writes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
