"""Activity log browsing, statistics and purge. Administrators only."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.store import ActivityLogStore, LogFilter
from projetrack.api.envelope import ok, paginated
from projetrack.auth.dependencies import RequestContext, require_admin
from projetrack.config import settings
from projetrack.db.engine import get_session
from projetrack.errors import NotFoundError, ValidationError
from projetrack.reports import queries
from projetrack.retention import purge_logs
from projetrack.schemas.responses import LogView

router = APIRouter(prefix="/logs", tags=["logs"])


def _as_utc(moment: datetime | None) -> datetime | None:
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


@router.get("")
async def list_logs(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
    category: str | None = Query(None),
    actor: str | None = Query(None),
    search: str | None = Query(None),
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    size = min(page_size or settings.reporting.default_page_size, settings.reporting.max_page_size)
    filters = LogFilter(
        category=category,
        actor=actor,
        search=search,
        start=_as_utc(start),
        end=_as_utc(end),
    )
    records, total = await ActivityLogStore(db).query(filters, page, size)
    return paginated([LogView.model_validate(r) for r in records], page, size, total)


@router.get("/statistics")
async def statistics(
    days: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(await queries.log_statistics_report(db, datetime.now(UTC), days))


@router.get("/recent")
async def recent(
    count: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(await queries.recent_activity(db, datetime.now(UTC), count))


@router.get("/top-actors")
async def top_actors(
    days: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(await queries.top_actors_report(db, datetime.now(UTC), days, limit))


@router.get("/user-activity/{user_id}")
async def user_activity(
    user_id: uuid.UUID,
    days: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(await queries.user_activity(db, user_id, datetime.now(UTC), days))


@router.delete("/purge")
async def purge(
    days: int | None = Query(None, description="Defaults to LOG_RETENTION_DAYS"),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    if days is None:
        days = settings.log_retention_days
    if days < 1:
        raise ValidationError("days must be at least 1")
    count = await purge_logs(db, days, ctx.actor, ctx.ip)
    return ok({"deleted": count}, f"{count} log records deleted")


@router.get("/{record_id}")
async def get_log(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    record = await ActivityLogStore(db).get(record_id)
    if record is None:
        raise NotFoundError("Log record not found")
    return ok(LogView.model_validate(record))


@router.delete("/{record_id}")
async def delete_log(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    if not await ActivityLogStore(db).delete_by_id(record_id):
        raise NotFoundError("Log record not found")
    await db.commit()
    return ok(message="Log record deleted")
