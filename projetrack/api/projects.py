"""Project CRUD."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_user
from projetrack.db.engine import get_session
from projetrack.schemas.requests import ProjectCreate, ProjectUpdate
from projetrack.schemas.responses import ProjectView
from projetrack.services.projects import project_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(
    status: int | None = Query(None),
    unit_id: uuid.UUID | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    projects = await project_service.list_projects(db, status, unit_id, search)
    return ok([ProjectView.model_validate(p) for p in projects])


@router.get("/{project_id}")
async def get_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    project = await project_service.get(db, project_id)
    return ok(ProjectView.model_validate(project))


@router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    project = await project_service.create(db, ctx, body)
    return ok(ProjectView.model_validate(project), "Project added")


@router.put("/{project_id}")
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    project = await project_service.update(db, ctx, project_id, body)
    return ok(ProjectView.model_validate(project), "Project updated")


@router.delete("/{project_id}")
async def delete_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await project_service.delete(db, ctx, project_id)
    return ok(message="Project deleted")
