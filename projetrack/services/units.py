"""Organizational unit mutations."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.errors import ReferentialConflictError, ValidationError
from projetrack.models.project import Project
from projetrack.models.unit import Unit
from projetrack.schemas.requests import UnitIn
from projetrack.services.common import commit, count, get_or_404, required

logger = logging.getLogger(__name__)


class UnitService:
    async def list_all(self, db: AsyncSession) -> list[Unit]:
        result = await db.execute(select(Unit).order_by(Unit.name))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, unit_id: uuid.UUID) -> Unit:
        return await get_or_404(db, Unit, unit_id, "Unit")

    async def _ensure_unique(
        self, db: AsyncSession, name: str, exclude: uuid.UUID | None = None
    ) -> None:
        where = [func.lower(Unit.name) == name.lower()]
        if exclude is not None:
            where.append(Unit.id != exclude)
        if await count(db, Unit.id, *where):
            raise ValidationError(f"A unit named '{name}' already exists")

    async def create(self, db: AsyncSession, ctx: RequestContext, data: UnitIn) -> Unit:
        name = required(data.name, "Unit name")
        await self._ensure_unique(db, name)

        unit = Unit(name=name)
        db.add(unit)
        await commit(db, "unit create")
        logger.info("Unit added: %s (by %s)", name, ctx.actor)

        await activity_logger.unit_added(name, ctx.actor, ctx.ip)
        return unit

    async def update(
        self, db: AsyncSession, ctx: RequestContext, unit_id: uuid.UUID, data: UnitIn
    ) -> Unit:
        name = required(data.name, "Unit name")
        unit = await self.get(db, unit_id)
        await self._ensure_unique(db, name, exclude=unit.id)

        unit.name = name
        await commit(db, "unit update")
        logger.info("Unit updated: %s (by %s)", name, ctx.actor)

        await activity_logger.unit_updated(name, ctx.actor, ctx.ip)
        return unit

    async def delete(self, db: AsyncSession, ctx: RequestContext, unit_id: uuid.UUID) -> None:
        """Delete an unreferenced unit. Units that own projects are rejected."""
        unit = await self.get(db, unit_id)

        dependents = await count(db, Project.id, Project.unit_id == unit.id)
        if dependents:
            raise ReferentialConflictError(
                f"Unit '{unit.name}' is used by {dependents} project(s) and cannot be deleted",
                dependents=dependents,
            )

        name = unit.name
        await db.delete(unit)
        await commit(db, "unit delete")
        logger.info("Unit deleted: %s (by %s)", name, ctx.actor)

        await activity_logger.unit_deleted(name, ctx.actor, ctx.ip)


unit_service = UnitService()
