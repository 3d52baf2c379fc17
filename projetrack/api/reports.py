"""Aggregate reports over projects, stages and activity."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_user
from projetrack.db.engine import get_session
from projetrack.reports import queries

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary")
async def summary(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.summary_report(db))


@router.get("/general")
async def general(
    category: str | None = Query(None, description="department, directorate or status"),
    value: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.general_report(db, datetime.now(UTC), category, value))


@router.get("/project/{project_id}")
async def project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.project_report(db, project_id, datetime.now(UTC)))


@router.get("/units")
async def units(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.unit_report(db))


@router.get("/sponsors")
async def sponsors(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.sponsor_report(db))


@router.get("/users")
async def users(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.user_report(db))


@router.get("/monthly")
async def monthly(
    months: int | None = Query(None, ge=1, le=120),
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.monthly_report(db, datetime.now(UTC), months))


@router.get("/stages")
async def stages(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.stage_report(db, datetime.now(UTC)))


@router.get("/dashboard")
async def dashboard(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    return ok(await queries.dashboard(db, datetime.now(UTC)))
