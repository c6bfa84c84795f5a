"""Engine and sessions for the device-local SQLite store."""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from simpleauth.config import Settings
from simpleauth.persistence.tables import metadata


def _is_memory(database: str | None) -> bool:
    return not database or database == ":memory:"


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.storage.url``.

    A file database gets its parent directory created. An in-memory database
    is pinned to one connection so every session sees the same data.

    Args:
        settings: Application settings with the storage URL

    Returns:
        Configured async engine
    """
    url = make_url(settings.storage.url)
    kwargs = {}
    if _is_memory(url.database):
        kwargs["poolclass"] = StaticPool
    else:
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(
        url,
        echo=settings.storage.echo,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory the stores open one session per call from.

    Args:
        engine: Database engine

    Returns:
        Session factory
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the secure item table if it is missing.

    Args:
        engine: Database engine
    """
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
