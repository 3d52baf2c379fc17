"""Project progress: Gantt stages and progress entries."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_user
from projetrack.db.engine import get_session
from projetrack.schemas.requests import ProgressCreate, ProgressUpdate, StageCreate, StageUpdate
from projetrack.schemas.responses import ProgressView, ProjectView, StageView
from projetrack.services.progress import progress_service

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/project/{project_id}")
async def project_progress(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    progress = await progress_service.project_progress(db, project_id)
    return ok(
        {
            "project": ProjectView.model_validate(progress.project),
            "stages": [StageView.model_validate(s) for s in progress.stages],
            "entries": [ProgressView.model_validate(e) for e in progress.entries],
        }
    )


# ── Stages (declared before /{entry_id} routes) ──────────────────────


@router.post("/stages", status_code=201)
async def add_stage(
    body: StageCreate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    stage = await progress_service.add_stage(db, ctx, body)
    return ok(StageView.model_validate(stage), "Stage added")


@router.put("/stages/{stage_id}")
async def update_stage(
    stage_id: uuid.UUID,
    body: StageUpdate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    stage = await progress_service.update_stage(db, ctx, stage_id, body)
    return ok(StageView.model_validate(stage), "Stage updated")


@router.delete("/stages/{stage_id}")
async def delete_stage(
    stage_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await progress_service.delete_stage(db, ctx, stage_id)
    return ok(message="Stage deleted")


# ── Entries ──────────────────────────────────────────────────────────


@router.post("", status_code=201)
async def add_entry(
    body: ProgressCreate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    entry = await progress_service.add_entry(db, ctx, body)
    return ok(ProgressView.model_validate(entry), "Progress added")


@router.put("/{entry_id}")
async def update_entry(
    entry_id: uuid.UUID,
    body: ProgressUpdate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    entry = await progress_service.update_entry(db, ctx, entry_id, body)
    return ok(ProgressView.model_validate(entry), "Progress updated")


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await progress_service.delete_entry(db, ctx, entry_id)
    return ok(message="Progress deleted")
