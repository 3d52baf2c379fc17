"""Organizational unit CRUD."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_user
from projetrack.db.engine import get_session
from projetrack.schemas.requests import UnitIn
from projetrack.schemas.responses import UnitView
from projetrack.services.units import unit_service

router = APIRouter(prefix="/units", tags=["units"])


@router.get("")
async def list_units(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok([UnitView.model_validate(u) for u in await unit_service.list_all(db)])


@router.get("/{unit_id}")
async def get_unit(
    unit_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(UnitView.model_validate(await unit_service.get(db, unit_id)))


@router.post("", status_code=201)
async def create_unit(
    body: UnitIn,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    unit = await unit_service.create(db, ctx, body)
    return ok(UnitView.model_validate(unit), "Unit added")


@router.put("/{unit_id}")
async def update_unit(
    unit_id: uuid.UUID,
    body: UnitIn,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    unit = await unit_service.update(db, ctx, unit_id, body)
    return ok(UnitView.model_validate(unit), "Unit updated")


@router.delete("/{unit_id}")
async def delete_unit(
    unit_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await unit_service.delete(db, ctx, unit_id)
    return ok(message="Unit deleted")
