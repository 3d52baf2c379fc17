"""Login throttling: a Redis fixed-window counter per (staff id, client IP).

Keying on the pair keeps one noisy address from locking every account and one
targeted account from locking every address. A successful login clears the
pair's counter. Redis errors let the attempt through.

Usage:
    from projetrack.auth.rate_limiter import login_rate_limiter

    key = login_rate_limiter.key_for("S-100", "10.0.0.1")
    allowed, retry_after = await login_rate_limiter.check(key)
    ...
    await login_rate_limiter.reset(key)
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis

from projetrack.config import settings
from projetrack.db.engine import redis_client

logger = logging.getLogger(__name__)

_KEY_PREFIX = "login-attempts:"


class LoginRateLimiter:
    """At most `limit` failed-or-pending attempts per key in each `window` seconds."""

    def __init__(self, redis: aioredis.Redis, limit: int, window: int) -> None:
        self._redis = redis
        self.limit = limit
        self.window = window

    @staticmethod
    def key_for(staff_id: str, ip: str | None) -> str:
        return f"{_KEY_PREFIX}{staff_id.strip().lower()}:{ip or 'unknown'}"

    async def check(self, key: str) -> tuple[bool, int]:
        """Count one attempt. Returns (allowed, retry_after seconds; 0 when allowed)."""
        try:
            attempts = await self._redis.incr(key)
            if attempts == 1:
                await self._redis.expire(key, self.window)
            if attempts <= self.limit:
                return True, 0

            ttl = await self._redis.ttl(key)
            logger.info("Login throttled for %s (%d attempts)", key, attempts)
            return False, max(ttl, 1)
        except aioredis.RedisError:
            logger.exception("Login rate limiter unavailable for %s", key)
            return True, 0

    async def reset(self, key: str) -> None:
        """Forget the attempts counted against `key`."""
        try:
            await self._redis.delete(key)
        except aioredis.RedisError:
            logger.exception("Could not reset login attempts for %s", key)


login_rate_limiter = LoginRateLimiter(
    redis_client,
    limit=settings.security.login_rate_limit,
    window=settings.security.login_rate_window,
)
