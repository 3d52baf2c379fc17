"""Progress entries and Gantt stages of a project."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.errors import ReferentialConflictError, ValidationError
from projetrack.models.base import utcnow
from projetrack.models.gantt_stage import GanttStage
from projetrack.models.progress_entry import ProgressEntry
from projetrack.models.project import Project
from projetrack.schemas.requests import ProgressCreate, ProgressUpdate, StageCreate, StageUpdate
from projetrack.services.common import commit, count, get_or_404, required

logger = logging.getLogger(__name__)


def _validate_percent(percent: int | None) -> int:
    if percent is None or not 0 <= percent <= 100:
        raise ValidationError("Percent complete must be between 0 and 100")
    return percent


def _validate_dates(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError("Stage end date cannot be before its start date")


def _duration(start: date | None, end: date | None, given: int | None) -> int:
    if given is not None:
        if given < 0:
            raise ValidationError("Stage duration cannot be negative")
        return given
    if start is not None and end is not None:
        return (end - start).days
    return 0


@dataclass
class ProjectProgress:
    project: Project
    stages: list[GanttStage]
    entries: list[ProgressEntry]


class ProgressService:
    # ── Reads ────────────────────────────────────────────────────────

    async def project_progress(self, db: AsyncSession, project_id: uuid.UUID) -> ProjectProgress:
        """Stages in plan order and entries newest first for one project."""
        project = await get_or_404(db, Project, project_id, "Project")

        stages = await db.execute(
            select(GanttStage)
            .where(GanttStage.project_id == project_id)
            .order_by(GanttStage.order, GanttStage.start_date)
        )
        entries = await db.execute(
            select(ProgressEntry)
            .where(ProgressEntry.project_id == project_id)
            .order_by(ProgressEntry.entry_date.desc())
        )
        return ProjectProgress(
            project=project,
            stages=list(stages.scalars().all()),
            entries=list(entries.scalars().all()),
        )

    # ── Progress entries ─────────────────────────────────────────────

    async def add_entry(
        self, db: AsyncSession, ctx: RequestContext, data: ProgressCreate
    ) -> ProgressEntry:
        title = required(data.title, "Progress title")
        percent = _validate_percent(data.percent_complete)

        await get_or_404(db, Project, data.project_id, "Project")
        stage = await get_or_404(db, GanttStage, data.stage_id, "Stage")
        if stage.project_id != data.project_id:
            raise ValidationError("Stage does not belong to the project")

        entry = ProgressEntry(
            project_id=data.project_id,
            stage_id=stage.id,
            title=title,
            percent_complete=percent,
            entry_date=data.entry_date or utcnow(),
            description=(data.description or None),
            user_id=ctx.identity.user_id if ctx.identity else None,
        )
        db.add(entry)
        await commit(db, "progress create")
        logger.info("Progress added: %s (by %s)", title, ctx.actor)

        await activity_logger.progress_added(title, ctx.actor, ctx.ip)
        return entry

    async def update_entry(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        entry_id: uuid.UUID,
        data: ProgressUpdate,
    ) -> ProgressEntry:
        entry = await get_or_404(db, ProgressEntry, entry_id, "Progress entry")
        changes = data.model_dump(exclude_unset=True)

        if "title" in changes:
            entry.title = required(changes["title"], "Progress title")
        if "percent_complete" in changes:
            entry.percent_complete = _validate_percent(changes["percent_complete"])
        if changes.get("stage_id") is not None:
            stage = await get_or_404(db, GanttStage, changes["stage_id"], "Stage")
            if stage.project_id != entry.project_id:
                raise ValidationError("Stage does not belong to the project")
            entry.stage_id = stage.id
        if changes.get("entry_date") is not None:
            entry.entry_date = changes["entry_date"]
        if "description" in changes:
            entry.description = changes["description"] or None

        await commit(db, "progress update")
        logger.info("Progress updated: %s (by %s)", entry.title, ctx.actor)

        await activity_logger.progress_updated(entry.title, ctx.actor, ctx.ip)
        return entry

    async def delete_entry(self, db: AsyncSession, ctx: RequestContext, entry_id: uuid.UUID) -> None:
        entry = await get_or_404(db, ProgressEntry, entry_id, "Progress entry")

        title = entry.title
        await db.delete(entry)
        await commit(db, "progress delete")
        logger.info("Progress deleted: %s (by %s)", title, ctx.actor)

        await activity_logger.progress_deleted(title, ctx.actor, ctx.ip)

    # ── Gantt stages ─────────────────────────────────────────────────

    async def add_stage(self, db: AsyncSession, ctx: RequestContext, data: StageCreate) -> GanttStage:
        name = required(data.name, "Stage name")
        _validate_dates(data.start_date, data.end_date)
        await get_or_404(db, Project, data.project_id, "Project")

        stage = GanttStage(
            project_id=data.project_id,
            name=name,
            start_date=data.start_date,
            end_date=data.end_date,
            duration_days=_duration(data.start_date, data.end_date, data.duration_days),
            order=data.order,
        )
        db.add(stage)
        await commit(db, "stage create")
        logger.info("Gantt stage added: %s (by %s)", name, ctx.actor)

        await activity_logger.gantt_stage_added(name, ctx.actor, ctx.ip)
        return stage

    async def update_stage(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        stage_id: uuid.UUID,
        data: StageUpdate,
    ) -> GanttStage:
        stage = await get_or_404(db, GanttStage, stage_id, "Stage")
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes:
            stage.name = required(changes["name"], "Stage name")
        start = changes.get("start_date", stage.start_date)
        end = changes.get("end_date", stage.end_date)
        _validate_dates(start, end)
        stage.start_date, stage.end_date = start, end
        if "duration_days" in changes or {"start_date", "end_date"} & changes.keys():
            stage.duration_days = _duration(start, end, changes.get("duration_days"))
        if changes.get("order") is not None:
            stage.order = changes["order"]

        await commit(db, "stage update")
        logger.info("Gantt stage updated: %s (by %s)", stage.name, ctx.actor)

        await activity_logger.gantt_stage_updated(stage.name, ctx.actor, ctx.ip)
        return stage

    async def delete_stage(self, db: AsyncSession, ctx: RequestContext, stage_id: uuid.UUID) -> None:
        """Delete a stage that no progress entry refers to."""
        stage = await get_or_404(db, GanttStage, stage_id, "Stage")

        dependents = await count(db, ProgressEntry.id, ProgressEntry.stage_id == stage.id)
        if dependents:
            raise ReferentialConflictError(
                f"Stage '{stage.name}' has {dependents} progress entry(ies) and cannot be deleted",
                dependents=dependents,
            )

        name = stage.name
        await db.delete(stage)
        await commit(db, "stage delete")
        logger.info("Gantt stage deleted: %s (by %s)", name, ctx.actor)

        await activity_logger.gantt_stage_deleted(name, ctx.actor, ctx.ip)


progress_service = ProgressService()
