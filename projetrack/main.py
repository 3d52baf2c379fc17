"""FastAPI application entry point: wires everything together.

Usage:
    python -m projetrack.main
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from projetrack.api import auth, logs, progress, projects, reports, sponsors, units, users
from projetrack.api.errors import register_exception_handlers
from projetrack.config import settings
from projetrack.db.engine import db_lifespan
from projetrack.health import check_system_health
from projetrack.retention import enforce_log_retention

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting ProjeTrack (env=%s)", settings.environment)

    async with db_lifespan():
        logger.info("Database initialized")

        if settings.log_retention_days > 0:
            await enforce_log_retention(settings.log_retention_days)
        else:
            logger.info("LOG_RETENTION_DAYS=0, activity log purge disabled")

        yield
        logger.info("Shutting down ProjeTrack...")

    logger.info("ProjeTrack shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    application = FastAPI(
        title="ProjeTrack API",
        description="Project tracking administration with an activity audit trail",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(application)

    for module in (auth, projects, units, sponsors, users, progress, logs, reports):
        application.include_router(module.router, prefix="/api")

    @application.get("/health")
    async def health_check() -> JSONResponse:
        """Database and Redis reachability."""
        checks = await check_system_health()
        healthy = all(check["status"] == "ok" for check in checks.values())
        body: dict[str, Any] = {
            "status": "ok" if healthy else "degraded",
            "environment": settings.environment,
            "checks": checks,
        }
        return JSONResponse(status_code=200 if healthy else 503, content=body)

    return application


app = create_app()


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "projetrack.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
