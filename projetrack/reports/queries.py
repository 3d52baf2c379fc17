"""Report loaders: fetch snapshots from the database and hand them to the aggregator.

Every report endpoint goes through here; none of them aggregates on its own.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.store import ActivityLogStore, LogFilter
from projetrack.config import settings
from projetrack.errors import NotFoundError, ValidationError
from projetrack.models.activity_log import ActivityLog
from projetrack.models.enums import LogCategory
from projetrack.models.gantt_stage import GanttStage
from projetrack.models.project import Project
from projetrack.models.sponsor import Sponsor
from projetrack.models.unit import Unit
from projetrack.models.user import User
from projetrack.reports import aggregator
from projetrack.reports.formatters import time_ago
from projetrack.schemas.reports import (
    ActorCount,
    GroupStats,
    LogStatistics,
    MonthBucket,
    StageStats,
    UserStats,
)
from projetrack.schemas.responses import ProjectView

# Filters accepted by the general report. Text filters compare case-insensitively.
_TEXT_FILTERS = {
    "department": Project.department,
    "directorate": Project.directorate,
}
GENERAL_CATEGORIES = (*_TEXT_FILTERS, "status")


async def load_projects(
    db: AsyncSession,
    category: str | None = None,
    value: str | None = None,
) -> list[Project]:
    """All projects, optionally narrowed to one department, directorate or status."""
    query = select(Project)
    if category and value:
        category = category.lower()
        if category not in GENERAL_CATEGORIES:
            expected = ", ".join(GENERAL_CATEGORIES)
            msg = f"Unknown report category: {category} (expected one of {expected})"
            raise ValidationError(msg)
        if category in _TEXT_FILTERS:
            query = query.where(func.lower(_TEXT_FILTERS[category]) == value.lower())
        else:
            try:
                query = query.where(Project.status == int(value))
            except ValueError:
                msg = f"Invalid project status: {value}"
                raise ValidationError(msg) from None
    result = await db.execute(query)
    return list(result.scalars().all())


async def _all(db: AsyncSession, model: type) -> list[Any]:
    result = await db.execute(select(model))
    return list(result.scalars().all())


# ── Project reports ──────────────────────────────────────────────────


async def _user_count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(User.id)))
    return result.scalar() or 0


async def summary_report(db: AsyncSession) -> dict[str, Any]:
    projects = await load_projects(db)
    return {
        "summary": aggregator.summarize_projects(projects, await _user_count(db)),
        "status_counts": aggregator.status_rollup(projects),
    }


def _portfolio(projects: list[Project], stages: list[GanttStage], now: datetime) -> dict[str, Any]:
    return {
        "summary": aggregator.summarize_projects(projects),
        "by_department": aggregator.rollup_by_department(projects),
        "by_directorate": aggregator.rollup_by_directorate(projects),
        "monthly": aggregator.monthly_trend(projects, now, settings.reporting.trend_months),
        "stages": aggregator.stage_rollup(stages, now.date()),
    }


async def general_report(
    db: AsyncSession,
    now: datetime,
    category: str | None = None,
    value: str | None = None,
) -> dict[str, Any]:
    projects = await load_projects(db, category, value)
    stages = await _all(db, GanttStage)
    return {
        "filter": {"category": category, "value": value} if category and value else None,
        **_portfolio(projects, stages, now),
    }


async def project_report(db: AsyncSession, project_id: uuid.UUID, now: datetime) -> dict[str, Any]:
    """One project's details alongside the statistics of the whole portfolio."""
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError(f"Project not found (id: {project_id})")

    projects = await load_projects(db)
    stages = await _all(db, GanttStage)
    return {
        "project": ProjectView.model_validate(project),
        **_portfolio(projects, stages, now),
        "projects": [ProjectView.model_validate(p) for p in projects],
    }


async def user_report(db: AsyncSession) -> UserStats:
    return aggregator.role_rollup(await _all(db, User))


async def unit_report(db: AsyncSession) -> list[GroupStats]:
    units = await _all(db, Unit)
    return aggregator.rollup_by_unit(units, await load_projects(db))


async def sponsor_report(db: AsyncSession) -> list[GroupStats]:
    sponsors = await _all(db, Sponsor)
    return aggregator.rollup_by_sponsor(sponsors, await load_projects(db))


async def monthly_report(db: AsyncSession, now: datetime, months: int | None = None) -> list[MonthBucket]:
    months = months or settings.reporting.trend_months
    return aggregator.monthly_trend(await load_projects(db), now, months)


async def stage_report(db: AsyncSession, now: datetime) -> list[StageStats]:
    return aggregator.stage_rollup(await _all(db, GanttStage), now.date())


async def dashboard(db: AsyncSession, now: datetime) -> dict[str, Any]:
    """Headline counts plus this-month vs last-month deltas."""
    projects = await load_projects(db)

    # Start of the previous month covers both compared months.
    year, month = aggregator.previous_month(now.year, now.month)
    window_start = now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)
    records = await ActivityLogStore(db).records_since(window_start)

    return {
        "summary": aggregator.summarize_projects(projects, await _user_count(db)),
        "projects_started": aggregator.month_over_month(
            aggregator.count_by_month(p.start_date for p in projects), now
        ),
        "activity": aggregator.month_over_month(
            aggregator.count_by_month(r.created_at for r in records), now
        ),
        "recent_activity": await recent_activity(db, now),
    }


# ── Activity reports ─────────────────────────────────────────────────


def activity_item(record: ActivityLog, now: datetime) -> dict[str, Any]:
    return {
        "id": record.id,
        "category": record.category,
        "message": record.message,
        "actor": record.actor,
        "ip_address": record.ip_address,
        "created_at": record.created_at,
        "time_ago": time_ago(now, record.created_at),
    }


async def recent_activity(
    db: AsyncSession, now: datetime, count: int | None = None
) -> list[dict[str, Any]]:
    """Newest records, login/logout excluded."""
    count = count or settings.reporting.recent_activity_count
    sessions = tuple(category.value for category in LogCategory.session_events())
    records = await ActivityLogStore(db).recent(count, LogFilter(exclude_categories=sessions))
    return [activity_item(record, now) for record in records]


async def log_statistics_report(
    db: AsyncSession, now: datetime, days: int | None = None
) -> LogStatistics:
    days = days or settings.reporting.log_statistics_days
    records = await ActivityLogStore(db).records_since(now - timedelta(days=days))
    return aggregator.log_statistics(records, now, days)


async def top_actors_report(
    db: AsyncSession, now: datetime, days: int | None = None, limit: int | None = None
) -> list[ActorCount]:
    days = days or settings.reporting.log_statistics_days
    limit = limit or settings.reporting.top_actor_limit
    records = await ActivityLogStore(db).records_since(now - timedelta(days=days))
    return aggregator.top_actors(records, limit)


async def user_activity(
    db: AsyncSession, user_id: uuid.UUID, now: datetime, days: int | None = None
) -> dict[str, Any]:
    """One user's records over the window, matched on their display name."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    days = days or settings.reporting.log_statistics_days
    records = await ActivityLogStore(db).records_for_actor(user.full_name, now - timedelta(days=days))
    last_login = next(
        (r.created_at for r in records if r.category == LogCategory.USER_LOGIN.value), None
    )
    return {
        "user": {"id": user.id, "full_name": user.full_name, "staff_id": user.staff_id},
        "days": days,
        "total": len(records),
        "last_login": last_login,
        "activities": [activity_item(record, now) for record in records],
    }
