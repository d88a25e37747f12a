"""SQLAlchemy engine and session factory for the on-device SQLite store."""

from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fieldlogger.infrastructure.database.base import Base


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def _is_memory_url(url: str) -> bool:
    return url.endswith(":memory:") or url in ("sqlite://", "sqlite+aiosqlite://")


def create_engine_for(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Build an async engine; in-memory databases share one connection."""
    async_url = _get_async_url(database_url)

    if _is_memory_url(async_url):
        return create_async_engine(
            async_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if async_url.startswith("sqlite+aiosqlite:///"):
        db_path = Path(async_url.removeprefix("sqlite+aiosqlite:///"))
        db_path.parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(async_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create the inspections table if it does not exist yet."""
    # Registers InspectionModel on Base.metadata
    from fieldlogger.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
