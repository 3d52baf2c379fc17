"""Bearer tokens: signed JWTs (python-jose) with Redis-backed revocation.

Claims: sub (user id), jti, exp, name (display name), role.
Logout stores the jti under `revoked:{jti}` until the token would expire.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from projetrack.config import settings
from projetrack.db.engine import redis_client
from projetrack.errors import AuthenticationError

logger = logging.getLogger(__name__)

_REVOKED_PREFIX = "revoked:"

if not settings.security.jwt_secret:
    logger.warning("JWT_SECRET not configured; using a per-process random secret")
_SECRET = settings.security.jwt_secret or secrets.token_urlsafe(48)


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    jti: str
    expires_at: datetime
    name: str
    role: int


def create_access_token(
    user_id: uuid.UUID,
    name: str,
    role: int,
    now: datetime | None = None,
) -> tuple[str, TokenClaims]:
    """Sign a new token for the user. Returns the encoded token and its claims."""
    now = now or datetime.now(UTC)
    claims = TokenClaims(
        user_id=user_id,
        jti=uuid.uuid4().hex,
        expires_at=now + timedelta(hours=settings.security.token_expire_hours),
        name=name,
        role=role,
    )
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "jti": claims.jti,
        "exp": claims.expires_at,
        "iat": now,
        "name": name,
        "role": role,
    }
    token = jwt.encode(payload, _SECRET, algorithm=settings.security.jwt_algorithm)
    return token, claims


def decode_token(token: str) -> TokenClaims:
    """Verify signature and expiry. Raises AuthenticationError on any defect."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[settings.security.jwt_algorithm])
        return TokenClaims(
            user_id=uuid.UUID(payload["sub"]),
            jti=str(payload["jti"]),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            name=str(payload.get("name", "")),
            role=int(payload.get("role", 0)),
        )
    except (JWTError, KeyError, ValueError, TypeError) as exc:
        raise AuthenticationError("Invalid or expired token") from exc


async def revoke_token(claims: TokenClaims, now: datetime | None = None) -> None:
    """Mark the token's jti as revoked for the rest of its lifetime."""
    now = now or datetime.now(UTC)
    ttl = int((claims.expires_at - now).total_seconds())
    if ttl <= 0:
        return
    await redis_client.set(f"{_REVOKED_PREFIX}{claims.jti}", "1", ex=ttl)


async def is_revoked(jti: str) -> bool:
    """Fails open: a Redis outage treats the token as not revoked."""
    try:
        return bool(await redis_client.exists(f"{_REVOKED_PREFIX}{jti}"))
    except Exception:
        logger.exception("Revocation check failed for jti %s", jti)
        return False
