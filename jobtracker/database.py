from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def to_async_url(database_url: str) -> str:
    # Convert sqlite:/// to sqlite+aiosqlite:///
    return database_url.replace("sqlite:///", "sqlite+aiosqlite:///")


def create_session_factory(
    database_url: str,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Build the async engine and session factory for cloud storage.

    Callers own the engine and must dispose it on shutdown.

    Returns:
        (engine, session_factory)
    """
    engine = create_async_engine(to_async_url(database_url), echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


async def init_db(engine: AsyncEngine) -> None:
    # Register tables on Base.metadata
    import jobtracker.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
