"""Activity logger: writes one activity_log row per administrative action.

Each wrapper fixes the category and renders its canonical message template.
Writes go through a dedicated session from the session factory, after the
caller has committed its own mutation.

Never raises: failures are logged and reported as a False return value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.store import ActivityLogStore, build_record
from projetrack.db.engine import async_session_factory
from projetrack.models.enums import LogCategory

logger = logging.getLogger(__name__)

# One canonical message template per category.
TEMPLATES: dict[LogCategory, str] = {
    LogCategory.USER_LOGIN: "{name} ({staff_id}) logged in",
    LogCategory.USER_LOGOUT: "{name} ({staff_id}) logged out",
    LogCategory.PASSWORD_CHANGED: "{name} ({staff_id}) changed their password",
    LogCategory.PROJECT_ADDED: "'{name}' project added",
    LogCategory.PROJECT_UPDATED: "'{name}' project updated",
    LogCategory.PROJECT_DELETED: "'{name}' project deleted",
    LogCategory.USER_ADDED: "user with staff id '{name}' added",
    LogCategory.USER_UPDATED: "user with staff id '{name}' updated",
    LogCategory.USER_DELETED: "user with staff id '{name}' deleted",
    LogCategory.UNIT_ADDED: "'{name}' unit added",
    LogCategory.UNIT_UPDATED: "'{name}' unit updated",
    LogCategory.UNIT_DELETED: "'{name}' unit deleted",
    LogCategory.SPONSOR_ADDED: "'{name}' sponsor added",
    LogCategory.SPONSOR_UPDATED: "'{name}' sponsor updated",
    LogCategory.SPONSOR_DELETED: "'{name}' sponsor deleted",
    LogCategory.PROGRESS_ADDED: "'{name}' progress entry added",
    LogCategory.PROGRESS_UPDATED: "'{name}' progress entry updated",
    LogCategory.PROGRESS_DELETED: "'{name}' progress entry deleted",
    LogCategory.GANTT_STAGE_ADDED: "'{name}' gantt stage added",
    LogCategory.GANTT_STAGE_UPDATED: "'{name}' gantt stage updated",
    LogCategory.GANTT_STAGE_DELETED: "'{name}' gantt stage deleted",
    LogCategory.LOGS_PURGED: "{count} log records older than {days} days deleted",
}


def render(category: LogCategory, **fields: object) -> str:
    return TEMPLATES[category].format(**fields)


class ActivityLogger:
    """Best-effort facade over ActivityLogStore.

    Usage:
        from projetrack.activity.logger import activity_logger

        await activity_logger.project_added("Apollo", ctx.actor, ctx.ip)
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def log(
        self,
        category: LogCategory | str,
        message: str,
        actor: str | None,
        ip: str | None = None,
        user_agent: str | None = None,
        extra: str | None = None,
    ) -> bool:
        """Append one record. Returns False (never raises) when the write fails."""
        label = category.value if isinstance(category, LogCategory) else category
        try:
            record = build_record(label, message, actor, ip, user_agent, extra)
            async with self._session_factory() as db:
                await ActivityLogStore(db).append(record)
                await db.commit()
        except Exception:
            logger.exception("Failed to persist activity log: %s (actor=%s)", label, actor)
            return False
        return True

    async def _entity(
        self, category: LogCategory, name: str, actor: str | None, ip: str | None
    ) -> bool:
        return await self.log(category, render(category, name=name), actor, ip)

    # ── Sessions ─────────────────────────────────────────────────────

    async def user_login(
        self, staff_id: str, name: str, ip: str | None, user_agent: str | None
    ) -> bool:
        message = render(LogCategory.USER_LOGIN, name=name, staff_id=staff_id)
        return await self.log(LogCategory.USER_LOGIN, message, name, ip, user_agent)

    async def user_logout(self, staff_id: str, name: str, ip: str | None) -> bool:
        message = render(LogCategory.USER_LOGOUT, name=name, staff_id=staff_id)
        return await self.log(LogCategory.USER_LOGOUT, message, name, ip)

    async def password_changed(self, staff_id: str, name: str, ip: str | None) -> bool:
        message = render(LogCategory.PASSWORD_CHANGED, name=name, staff_id=staff_id)
        return await self.log(LogCategory.PASSWORD_CHANGED, message, name, ip)

    # ── Projects ─────────────────────────────────────────────────────

    async def project_added(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROJECT_ADDED, name, actor, ip)

    async def project_updated(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROJECT_UPDATED, name, actor, ip)

    async def project_deleted(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROJECT_DELETED, name, actor, ip)

    # ── Users (identified by staff id) ───────────────────────────────

    async def user_added(self, staff_id: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.USER_ADDED, staff_id, actor, ip)

    async def user_updated(self, staff_id: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.USER_UPDATED, staff_id, actor, ip)

    async def user_deleted(self, staff_id: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.USER_DELETED, staff_id, actor, ip)

    # ── Units ────────────────────────────────────────────────────────

    async def unit_added(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.UNIT_ADDED, name, actor, ip)

    async def unit_updated(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.UNIT_UPDATED, name, actor, ip)

    async def unit_deleted(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.UNIT_DELETED, name, actor, ip)

    # ── Sponsors ─────────────────────────────────────────────────────

    async def sponsor_added(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.SPONSOR_ADDED, name, actor, ip)

    async def sponsor_updated(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.SPONSOR_UPDATED, name, actor, ip)

    async def sponsor_deleted(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.SPONSOR_DELETED, name, actor, ip)

    # ── Progress entries ─────────────────────────────────────────────

    async def progress_added(self, title: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROGRESS_ADDED, title, actor, ip)

    async def progress_updated(self, title: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROGRESS_UPDATED, title, actor, ip)

    async def progress_deleted(self, title: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.PROGRESS_DELETED, title, actor, ip)

    # ── Gantt stages ─────────────────────────────────────────────────

    async def gantt_stage_added(self, name: str, actor: str | None, ip: str | None = None) -> bool:
        return await self._entity(LogCategory.GANTT_STAGE_ADDED, name, actor, ip)

    async def gantt_stage_updated(
        self, name: str, actor: str | None, ip: str | None = None
    ) -> bool:
        return await self._entity(LogCategory.GANTT_STAGE_UPDATED, name, actor, ip)

    async def gantt_stage_deleted(
        self, name: str, actor: str | None, ip: str | None = None
    ) -> bool:
        return await self._entity(LogCategory.GANTT_STAGE_DELETED, name, actor, ip)

    # ── Maintenance ──────────────────────────────────────────────────

    async def logs_purged(
        self, count: int, days: int, actor: str | None, ip: str | None = None
    ) -> bool:
        message = render(LogCategory.LOGS_PURGED, count=count, days=days)
        return await self.log(LogCategory.LOGS_PURGED, message, actor, ip, extra=f"days={days}")


# Module-level singleton
activity_logger = ActivityLogger(async_session_factory)
