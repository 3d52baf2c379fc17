"""Dependency reachability checks for `GET /health`."""

from __future__ import annotations

import time
from typing import Any

from sqlalchemy import text

from projetrack.db.engine import async_session_factory, redis_client


async def check_system_health() -> dict[str, Any]:
    """PostgreSQL and Redis status with latency in milliseconds."""
    health: dict[str, Any] = {}

    try:
        t0 = time.monotonic()
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        ms = int((time.monotonic() - t0) * 1000)
        health["postgresql"] = {"status": "ok", "latency_ms": ms}
    except Exception as exc:
        health["postgresql"] = {"status": "error", "error": exc.__class__.__name__}

    try:
        t0 = time.monotonic()
        await redis_client.ping()
        ms = int((time.monotonic() - t0) * 1000)
        health["redis"] = {"status": "ok", "latency_ms": ms}
    except Exception as exc:
        health["redis"] = {"status": "error", "error": exc.__class__.__name__}

    return health
