"""Sponsor mutations and search.

Projects name sponsors in free text, so the delete guard counts projects
whose sponsor field contains the sponsor name (case-sensitive substring).
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.errors import ReferentialConflictError, ValidationError
from projetrack.models.project import Project
from projetrack.models.sponsor import Sponsor
from projetrack.schemas.requests import SponsorIn
from projetrack.services.common import commit, count, get_or_404, required

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


def _blank_to_none(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


class SponsorService:
    async def list_all(self, db: AsyncSession) -> list[Sponsor]:
        result = await db.execute(select(Sponsor).order_by(Sponsor.name))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, sponsor_id: uuid.UUID) -> Sponsor:
        return await get_or_404(db, Sponsor, sponsor_id, "Sponsor")

    async def search(self, db: AsyncSession, term: str) -> list[Sponsor]:
        """Case-insensitive match on name or unit name, at most SEARCH_LIMIT rows."""
        term = term.strip()
        if not term:
            return []
        result = await db.execute(
            select(Sponsor)
            .where(
                or_(
                    Sponsor.name.icontains(term, autoescape=True),
                    Sponsor.unit_name.icontains(term, autoescape=True),
                )
            )
            .order_by(Sponsor.name)
            .limit(SEARCH_LIMIT)
        )
        return list(result.scalars().all())

    async def _ensure_unique(
        self, db: AsyncSession, name: str, exclude: uuid.UUID | None = None
    ) -> None:
        where = [func.lower(Sponsor.name) == name.lower()]
        if exclude is not None:
            where.append(Sponsor.id != exclude)
        if await count(db, Sponsor.id, *where):
            raise ValidationError(f"A sponsor named '{name}' already exists")

    async def create(self, db: AsyncSession, ctx: RequestContext, data: SponsorIn) -> Sponsor:
        name = required(data.name, "Sponsor name")
        await self._ensure_unique(db, name)

        sponsor = Sponsor(
            name=name,
            unit_name=_blank_to_none(data.unit_name),
            contact_info=_blank_to_none(data.contact_info),
            description=_blank_to_none(data.description),
        )
        db.add(sponsor)
        await commit(db, "sponsor create")
        logger.info("Sponsor added: %s (by %s)", name, ctx.actor)

        await activity_logger.sponsor_added(name, ctx.actor, ctx.ip)
        return sponsor

    async def update(
        self, db: AsyncSession, ctx: RequestContext, sponsor_id: uuid.UUID, data: SponsorIn
    ) -> Sponsor:
        name = required(data.name, "Sponsor name")
        sponsor = await self.get(db, sponsor_id)
        await self._ensure_unique(db, name, exclude=sponsor.id)

        sponsor.name = name
        sponsor.unit_name = _blank_to_none(data.unit_name)
        sponsor.contact_info = _blank_to_none(data.contact_info)
        sponsor.description = _blank_to_none(data.description)
        await commit(db, "sponsor update")
        logger.info("Sponsor updated: %s (by %s)", name, ctx.actor)

        await activity_logger.sponsor_updated(name, ctx.actor, ctx.ip)
        return sponsor

    async def delete(self, db: AsyncSession, ctx: RequestContext, sponsor_id: uuid.UUID) -> None:
        sponsor = await self.get(db, sponsor_id)

        dependents = await count(
            db, Project.id, Project.sponsor.contains(sponsor.name, autoescape=True)
        )
        if dependents:
            raise ReferentialConflictError(
                f"Sponsor '{sponsor.name}' is named by {dependents} project(s) "
                "and cannot be deleted",
                dependents=dependents,
            )

        name = sponsor.name
        await db.delete(sponsor)
        await commit(db, "sponsor delete")
        logger.info("Sponsor deleted: %s (by %s)", name, ctx.actor)

        await activity_logger.sponsor_deleted(name, ctx.actor, ctx.ip)


sponsor_service = SponsorService()
