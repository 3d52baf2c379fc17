"""User administration (admin only) and self-service password change."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, require_admin, require_user
from projetrack.db.engine import get_session
from projetrack.reports import queries
from projetrack.schemas.requests import PasswordChange, UserCreate, UserUpdate
from projetrack.schemas.responses import UserView
from projetrack.services.users import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/change-password")
async def change_password(
    body: PasswordChange,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_user),
) -> dict[str, Any]:
    await user_service.change_password(db, ctx, body)
    return ok(message="Password changed")


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok([UserView.model_validate(u) for u in await user_service.list_all(db)])


@router.get("/statistics")
async def user_statistics(
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(await queries.user_report(db))


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    return ok(UserView.model_validate(await user_service.get(db, user_id)))


@router.post("", status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    user = await user_service.create(db, ctx, body)
    return ok(UserView.model_validate(user), "User added")


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    user = await user_service.update(db, ctx, user_id, body)
    return ok(UserView.model_validate(user), "User updated")


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    ctx: RequestContext = Depends(require_admin),
) -> dict[str, Any]:
    await user_service.delete(db, ctx, user_id)
    return ok(message="User deleted")
