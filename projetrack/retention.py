"""Activity log retention: age-based purge of old audit records.

Runs once at startup when LOG_RETENTION_DAYS > 0, and on demand through
`DELETE /api/logs/purge`. Idempotent: running twice is harmless.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.activity.store import ActivityLogStore
from projetrack.db.engine import async_session_factory
from projetrack.models.enums import SYSTEM_ACTOR

logger = logging.getLogger(__name__)


def retention_cutoff(days: int, now: datetime | None = None) -> datetime:
    """Records created strictly before this instant are expired."""
    now = now or datetime.now(UTC)
    return now - timedelta(days=days)


async def purge_logs(
    db: AsyncSession,
    days: int,
    actor: str | None = None,
    ip: str | None = None,
) -> int:
    """Delete records older than `days` days, commit, and log the purge itself.

    Returns the number of deleted records.
    """
    count = await ActivityLogStore(db).delete_older_than(retention_cutoff(days))
    await db.commit()
    await activity_logger.logs_purged(count, days, actor, ip)
    return count


async def enforce_log_retention(days: int) -> int:
    """Startup job. Failures are logged and reported as 0 deleted records."""
    if days <= 0:
        return 0

    try:
        async with async_session_factory() as db:
            count = await ActivityLogStore(db).delete_older_than(retention_cutoff(days))
            await db.commit()
    except Exception:
        logger.exception("Activity log retention job failed")
        return 0

    if count > 0:
        await activity_logger.logs_purged(count, days, SYSTEM_ACTOR)

    logger.info("Retention job complete: activity_log=%d (days=%d)", count, days)
    return count
