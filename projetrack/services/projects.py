"""Project mutations and listing.

Deleting a project removes its Gantt stages and progress entries (database
cascade); the activity log records only the project deletion.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.errors import ValidationError
from projetrack.models.enums import ProjectStatus
from projetrack.models.project import Project
from projetrack.models.unit import Unit
from projetrack.schemas.requests import ProjectCreate, ProjectUpdate
from projetrack.services.common import commit, get_or_404, required

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("directorate", "purpose", "scope", "team", "success_criteria", "sponsor")


def _validate_status(status: int) -> int:
    try:
        return ProjectStatus(status).value
    except ValueError:
        msg = f"Invalid project status: {status}"
        raise ValidationError(msg) from None


def _validate_plan(
    cost: Decimal | None, start: date | None, end: date | None, staff_count: int
) -> None:
    if cost is not None and cost < 0:
        raise ValidationError("Project cost cannot be negative")
    if start is not None and end is not None and end < start:
        raise ValidationError("Project end date cannot be before its start date")
    if staff_count < 0:
        raise ValidationError("Staff count cannot be negative")


class ProjectService:
    async def list_projects(
        self,
        db: AsyncSession,
        status: int | None = None,
        unit_id: uuid.UUID | None = None,
        search: str | None = None,
    ) -> list[Project]:
        """All projects, newest first, optionally filtered."""
        query = select(Project)
        if status is not None:
            query = query.where(Project.status == status)
        if unit_id is not None:
            query = query.where(Project.unit_id == unit_id)
        if search:
            query = query.where(
                or_(
                    Project.name.icontains(search, autoescape=True),
                    Project.department.icontains(search, autoescape=True),
                    Project.sponsor.icontains(search, autoescape=True),
                )
            )
        result = await db.execute(query.order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, project_id: uuid.UUID) -> Project:
        return await get_or_404(db, Project, project_id, "Project")

    async def create(self, db: AsyncSession, ctx: RequestContext, data: ProjectCreate) -> Project:
        name = required(data.name, "Project name")
        status = _validate_status(data.status)
        _validate_plan(data.cost, data.start_date, data.end_date, data.staff_count)
        if data.unit_id is not None:
            await get_or_404(db, Unit, data.unit_id, "Unit")

        project = Project(
            name=name,
            department=(data.department or "").strip(),
            unit_id=data.unit_id,
            cost=data.cost,
            start_date=data.start_date,
            end_date=data.end_date,
            status=status,
            staff_count=data.staff_count,
            **{field: getattr(data, field) or None for field in _TEXT_FIELDS},
        )
        db.add(project)
        await commit(db, "project create")
        logger.info("Project added: %s (by %s)", name, ctx.actor)

        await activity_logger.project_added(name, ctx.actor, ctx.ip)
        return project

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        project_id: uuid.UUID,
        data: ProjectUpdate,
    ) -> Project:
        """Apply only the fields present in the request body."""
        project = await self.get(db, project_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        if "name" in changes:
            changes["name"] = required(changes["name"], "Project name")
        if "status" in changes:
            if changes["status"] is None:
                raise ValidationError("Project status is required")
            changes["status"] = _validate_status(changes["status"])
        if "department" in changes:
            changes["department"] = (changes["department"] or "").strip()
        if changes.get("staff_count") is None:
            changes.pop("staff_count", None)

        _validate_plan(
            changes.get("cost", project.cost),
            changes.get("start_date", project.start_date),
            changes.get("end_date", project.end_date),
            changes.get("staff_count", project.staff_count),
        )
        if changes.get("unit_id") is not None:
            await get_or_404(db, Unit, changes["unit_id"], "Unit")

        for field, value in changes.items():
            setattr(project, field, value)
        await commit(db, "project update")
        logger.info("Project updated: %s (by %s)", project.name, ctx.actor)

        await activity_logger.project_updated(project.name, ctx.actor, ctx.ip)
        return project

    async def delete(self, db: AsyncSession, ctx: RequestContext, project_id: uuid.UUID) -> None:
        project = await self.get(db, project_id)

        name = project.name
        await db.delete(project)
        await commit(db, "project delete")
        logger.info("Project deleted: %s (by %s)", name, ctx.actor)

        await activity_logger.project_deleted(name, ctx.actor, ctx.ip)


project_service = ProjectService()
