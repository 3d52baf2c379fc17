"""Sponsor CRUD and search."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_user
from projetrack.db.engine import get_session
from projetrack.schemas.requests import SponsorIn
from projetrack.schemas.responses import SponsorView
from projetrack.services.sponsors import sponsor_service

router = APIRouter(prefix="/sponsors", tags=["sponsors"])


@router.get("")
async def list_sponsors(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok([SponsorView.model_validate(s) for s in await sponsor_service.list_all(db)])


@router.get("/search")
async def search_sponsors(
    q: str = Query(""),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    sponsors = await sponsor_service.search(db, q)
    return ok([SponsorView.model_validate(s) for s in sponsors])


@router.get("/{sponsor_id}")
async def get_sponsor(
    sponsor_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(SponsorView.model_validate(await sponsor_service.get(db, sponsor_id)))


@router.post("", status_code=201)
async def create_sponsor(
    body: SponsorIn,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    sponsor = await sponsor_service.create(db, ctx, body)
    return ok(SponsorView.model_validate(sponsor), "Sponsor added")


@router.put("/{sponsor_id}")
async def update_sponsor(
    sponsor_id: uuid.UUID,
    body: SponsorIn,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    sponsor = await sponsor_service.update(db, ctx, sponsor_id, body)
    return ok(SponsorView.model_validate(sponsor), "Sponsor updated")


@router.delete("/{sponsor_id}")
async def delete_sponsor(
    sponsor_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await sponsor_service.delete(db, ctx, sponsor_id)
    return ok(message="Sponsor deleted")
