"""Database and Redis handles shared by the API, the activity logger and the retention job.

Request handlers get a session through `get_session`; the activity logger and
the retention job open their own short-lived sessions from
`async_session_factory` so their commits never ride on a request transaction.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from projetrack.config import settings

logger = logging.getLogger(__name__)

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,
    pool_recycle=3600,
)

# Instances stay readable after commit: handlers serialize them and the
# activity logger reads their names once the mutation is committed.
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Token revocation list and login attempt counters.
redis_client: aioredis.Redis = aioredis.from_url(settings.db.redis_url, decode_responses=True)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request.

    Mutating handlers commit explicitly before logging; the commit here only
    closes out read-only requests.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def _create_schema() -> None:
    """Create missing tables outside production, where Alembic owns the schema."""
    from projetrack.models import Base

    if settings.is_production:
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema ensured for %d tables", len(Base.metadata.tables))


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Open the pool (and schema in development) for the app's lifetime."""
    await _create_schema()
    try:
        yield
    finally:
        await engine.dispose()
        await redis_client.aclose()
