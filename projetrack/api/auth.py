"""Login, logout and the current identity."""
# ruff: noqa: B008

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.api.envelope import ok
from projetrack.auth.dependencies import RequestContext, client_ip, require_user
from projetrack.db.engine import get_session
from projetrack.schemas.requests import LoginRequest
from projetrack.schemas.responses import UserView
from projetrack.services.auth import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    result = await auth_service.login(
        db,
        body.staff_id,
        body.password,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ok(
        {
            "token": result.token,
            "token_type": "bearer",
            "expires_at": result.claims.expires_at,
            "user": UserView.model_validate(result.user),
        },
        "Login successful",
    )


@router.post("/logout")
async def logout(ctx: RequestContext = Depends(require_user)) -> dict[str, Any]:
    await auth_service.logout(ctx)
    return ok(message="Logged out")


@router.get("/me")
async def me(ctx: RequestContext = Depends(require_user)) -> dict[str, Any]:
    identity = ctx.identity
    assert identity is not None
    return ok(
        {
            "id": identity.user_id,
            "full_name": identity.full_name,
            "staff_id": identity.staff_id,
            "role": identity.role,
            "is_admin": identity.is_admin,
        }
    )
