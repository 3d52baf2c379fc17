"""Tests for projetrack/db/engine.py: schema creation and shutdown in the lifespan."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from projetrack.config import settings
from projetrack.db import engine as engine_module


def _engine():
    conn = AsyncMock()
    begin = MagicMock()
    begin.return_value.__aenter__ = AsyncMock(return_value=conn)
    begin.return_value.__aexit__ = AsyncMock(return_value=False)
    engine = MagicMock(begin=begin, dispose=AsyncMock())
    return engine, conn


class TestDbLifespan:
    @pytest.mark.asyncio
    async def test_creates_schema_outside_production(self):
        engine, conn = _engine()
        with (
            patch.object(engine_module, "engine", engine),
            patch.object(engine_module, "redis_client", AsyncMock()) as redis,
            patch.object(settings, "environment", "development"),
        ):
            async with engine_module.db_lifespan():
                conn.run_sync.assert_awaited_once()

        engine.dispose.assert_awaited_once()
        redis.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_production_leaves_schema_to_migrations(self):
        engine, conn = _engine()
        with (
            patch.object(engine_module, "engine", engine),
            patch.object(engine_module, "redis_client", AsyncMock()),
            patch.object(settings, "environment", "production"),
        ):
            async with engine_module.db_lifespan():
                pass

        engine.begin.assert_not_called()
        conn.run_sync.assert_not_awaited()
        engine.dispose.assert_awaited_once()
