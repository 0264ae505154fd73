from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from classtest.core.config import settings
from classtest.core.exceptions import ConfigMissing
from classtest.store.base import DocumentStore

# pool_pre_ping: check connection is alive before use (avoids "connection is closed" errors
# when DB or network closed idle connections).
# pool_recycle: discard connections after this many seconds to avoid stale connections.
engine: Optional[AsyncEngine] = (
    create_async_engine(
        settings.database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=300,
    )
    if settings.database_url
    else None
)

AsyncSessionLocal: Optional[async_sessionmaker] = (
    async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    if engine is not None
    else None
)

Base = declarative_base()

_store = None


async def init_db() -> None:
    """Create the documents table if it does not exist yet."""
    if engine is None:
        return
    # Model registration must happen before create_all
    import classtest.core.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_store() -> DocumentStore:
    """FastAPI dependency: the process-wide document store."""
    global _store
    missing = settings.missing_store_config()
    if missing or AsyncSessionLocal is None:
        raise ConfigMissing(missing or ["DATABASE_URL"])
    if _store is None:
        from classtest.store.sql import SqlDocumentStore

        _store = SqlDocumentStore(AsyncSessionLocal)
    return _store
