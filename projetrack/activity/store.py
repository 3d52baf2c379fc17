"""Activity log store: append-only persistence for ActivityLog rows.

Wraps one AsyncSession. Reads are newest-first with offset pagination;
deletes are irreversible. The store never commits: the caller owns the
transaction (the ActivityLogger commits its own short-lived session, the
API layer commits request sessions).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from projetrack.errors import StoreUnavailableError, ValidationError
from projetrack.models.activity_log import (
    ACTOR_MAX,
    CATEGORY_MAX,
    EXTRA_MAX,
    IP_MAX,
    MESSAGE_MAX,
    USER_AGENT_MAX,
    ActivityLog,
)
from projetrack.models.enums import SYSTEM_ACTOR, LogCategory

logger = logging.getLogger(__name__)


def _clip(value: str | None, limit: int) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value[:limit] or None


def build_record(
    category: str,
    message: str,
    actor: str | None,
    ip: str | None = None,
    user_agent: str | None = None,
    extra: str | None = None,
) -> ActivityLog:
    """Normalize raw fields into an unsaved ActivityLog.

    Blank actor becomes SYSTEM_ACTOR; oversized optional text is truncated.
    Raises ValidationError when the category is not a LogCategory label or
    the message is blank.
    """
    category = (category or "").strip()
    message = (message or "").strip()
    if not category:
        raise ValidationError("Log category is required")
    try:
        category = LogCategory(category).value
    except ValueError:
        raise ValidationError(f"Unknown log category: {category[:CATEGORY_MAX]}") from None
    if not message:
        raise ValidationError("Log message is required")

    return ActivityLog(
        category=category,
        message=message[:MESSAGE_MAX],
        actor=_clip(actor, ACTOR_MAX) or SYSTEM_ACTOR,
        ip_address=_clip(ip, IP_MAX),
        user_agent=_clip(user_agent, USER_AGENT_MAX),
        extra=_clip(extra, EXTRA_MAX),
    )


@dataclass(frozen=True)
class LogFilter:
    """Optional predicates for `ActivityLogStore.query`.

    `category` is an exact match, `actor` and `search` are substring matches
    (`search` looks at both message and actor), `start`/`end` are inclusive.
    """

    category: str | None = None
    actor: str | None = None
    search: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    exclude_categories: tuple[str, ...] = ()

    def apply(self, query: Select) -> Select:
        if self.category:
            query = query.where(ActivityLog.category == self.category)
        if self.actor:
            query = query.where(ActivityLog.actor.contains(self.actor, autoescape=True))
        if self.search:
            query = query.where(
                or_(
                    ActivityLog.message.contains(self.search, autoescape=True),
                    ActivityLog.actor.contains(self.search, autoescape=True),
                )
            )
        if self.start is not None:
            query = query.where(ActivityLog.created_at >= self.start)
        if self.end is not None:
            query = query.where(ActivityLog.created_at <= self.end)
        if self.exclude_categories:
            query = query.where(ActivityLog.category.not_in(self.exclude_categories))
        return query


class ActivityLogStore:
    """Insert / query / delete operations over the activity_log table."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def append(self, record: ActivityLog) -> uuid.UUID:
        """Persist one record and return its id (assigned on insert)."""
        try:
            self._db.add(record)
            await self._db.flush()
        except SQLAlchemyError as exc:
            msg = f"Activity log append failed: {exc.__class__.__name__}"
            raise StoreUnavailableError(msg) from exc
        return record.id

    async def query(
        self,
        filters: LogFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[ActivityLog], int]:
        """Return one page of records (newest first) and the filtered total."""
        filters = filters or LogFilter()
        page = max(page, 1)
        page_size = max(page_size, 1)

        result = await self._db.execute(filters.apply(select(func.count(ActivityLog.id))))
        total = result.scalar() or 0

        offset = (page - 1) * page_size
        result = await self._db.execute(
            filters.apply(select(ActivityLog))
            .order_by(ActivityLog.created_at.desc())
            .offset(offset)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    async def get(self, record_id: uuid.UUID) -> ActivityLog | None:
        return await self._db.get(ActivityLog, record_id)

    async def recent(self, limit: int, filters: LogFilter | None = None) -> list[ActivityLog]:
        """Newest `limit` records matching `filters`."""
        records, _ = await self.query(filters, page=1, page_size=limit)
        return records

    async def records_since(self, start: datetime, actor: str | None = None) -> list[ActivityLog]:
        """Every record created at or after `start` (optionally one actor's), newest first.

        Feeds the statistics aggregator; unlike `query`, actor is an exact match.
        """
        query = select(ActivityLog).where(ActivityLog.created_at >= start)
        if actor is not None:
            query = query.where(ActivityLog.actor == actor)
        result = await self._db.execute(query.order_by(ActivityLog.created_at.desc()))
        return list(result.scalars().all())

    async def records_for_actor(self, actor: str, start: datetime) -> list[ActivityLog]:
        return await self.records_since(start, actor=actor)

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Bulk-delete records created strictly before `cutoff`. Returns the count."""
        result = await self._db.execute(delete(ActivityLog).where(ActivityLog.created_at < cutoff))
        count = result.rowcount  # type: ignore[attr-defined]
        if count > 0:
            logger.info("Deleted %d activity log records (cutoff=%s)", count, cutoff.isoformat())
        return count

    async def delete_by_id(self, record_id: uuid.UUID) -> bool:
        result = await self._db.execute(delete(ActivityLog).where(ActivityLog.id == record_id))
        return (result.rowcount or 0) > 0  # type: ignore[attr-defined]
