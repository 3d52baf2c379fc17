"""Request identity for FastAPI routes.

`get_request_context` never fails: a missing, invalid or revoked token simply
yields an anonymous context whose actor is "System". `require_user` and
`require_admin` gate the routes that need an identity.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.auth.tokens import TokenClaims, decode_token, is_revoked
from projetrack.config import settings
from projetrack.db.engine import get_session
from projetrack.errors import AuthenticationError, PermissionDeniedError
from projetrack.models.enums import SYSTEM_ACTOR, UserRole
from projetrack.models.user import User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated user behind a request."""

    user_id: uuid.UUID
    full_name: str
    staff_id: str
    role: int
    claims: TokenClaims | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class RequestContext:
    identity: Identity | None
    ip: str | None
    user_agent: str | None

    @property
    def actor(self) -> str:
        """Display name credited in the activity log."""
        if self.identity is None or not self.identity.full_name.strip():
            return SYSTEM_ACTOR
        return self.identity.full_name


def client_ip(request: Request) -> str | None:
    """Socket peer address, or the first X-Forwarded-For hop behind a trusted proxy."""
    if settings.security.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


async def resolve_identity(db: AsyncSession, token: str | None) -> Identity | None:
    """Verify the token, reject revoked ones, and load the user it names."""
    if not token:
        return None
    try:
        claims = decode_token(token)
    except AuthenticationError:
        return None

    if await is_revoked(claims.jti):
        return None

    user = await db.get(User, claims.user_id)
    if user is None:
        return None

    return Identity(
        user_id=user.id,
        full_name=user.full_name,
        staff_id=user.staff_id,
        role=user.role,
        claims=claims,
    )


async def get_request_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),  # noqa: B008
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> RequestContext:
    token = credentials.credentials if credentials else None
    identity = await resolve_identity(db, token)
    return RequestContext(
        identity=identity,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


async def require_user(
    ctx: RequestContext = Depends(get_request_context),  # noqa: B008
) -> RequestContext:
    if ctx.identity is None:
        raise AuthenticationError("Authentication required")
    return ctx


async def require_admin(
    ctx: RequestContext = Depends(require_user),  # noqa: B008
) -> RequestContext:
    if not ctx.identity or not ctx.identity.is_admin:
        raise PermissionDeniedError("Administrator role required")
    return ctx
