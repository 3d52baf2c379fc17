"""Login and logout."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.auth.passwords import verify_password
from projetrack.auth.rate_limiter import login_rate_limiter
from projetrack.auth.tokens import TokenClaims, create_access_token, revoke_token
from projetrack.errors import AuthenticationError, RateLimitedError, ValidationError
from projetrack.models.user import User
from projetrack.services.users import user_service

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    token: str
    claims: TokenClaims
    user: User


class AuthService:
    async def login(
        self,
        db: AsyncSession,
        staff_id: str,
        password: str,
        ip: str | None,
        user_agent: str | None,
    ) -> LoginResult:
        """Verify credentials and issue a bearer token.

        Raises:
            ValidationError: staff id or password missing.
            RateLimitedError: too many attempts for this staff id from this IP.
            AuthenticationError: unknown staff id or wrong password.
        """
        staff_id = (staff_id or "").strip()
        if not staff_id or not password:
            raise ValidationError("Staff id and password are required")

        throttle_key = login_rate_limiter.key_for(staff_id, ip)
        allowed, retry_after = await login_rate_limiter.check(throttle_key)
        if not allowed:
            raise RateLimitedError("Too many login attempts, try again later", retry_after)

        user = await user_service.get_by_staff_id(db, staff_id)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for staff id %s from %s", staff_id, ip)
            raise AuthenticationError("Invalid staff id or password")

        await login_rate_limiter.reset(throttle_key)
        token, claims = create_access_token(user.id, user.full_name, user.role)
        logger.info("User logged in: %s", user.staff_id)

        await activity_logger.user_login(user.staff_id, user.full_name, ip, user_agent)
        return LoginResult(token=token, claims=claims, user=user)

    async def logout(self, ctx: RequestContext) -> None:
        """Revoke the caller's token. Anonymous contexts are a no-op."""
        identity = ctx.identity
        if identity is None:
            return
        if identity.claims is not None:
            await revoke_token(identity.claims)
        logger.info("User logged out: %s", identity.staff_id)

        await activity_logger.user_logout(identity.staff_id, identity.full_name, ctx.ip)


auth_service = AuthService()
