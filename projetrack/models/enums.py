"""Domain enums used across SQLAlchemy models and Pydantic schemas.

Project status and user role are stored as small integers (their codes are
part of the public API); log categories are stored as their string labels.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class ProjectStatus(IntEnum):
    """Lifecycle status of a project."""

    PENDING_APPROVAL = 1
    PLANNING = 2
    IN_PROGRESS = 3
    COMPLETED = 4
    CANCELLED = 5

    @classmethod
    def active(cls) -> frozenset[ProjectStatus]:
        """Statuses counted as "active" in every report."""
        return frozenset({cls.PLANNING, cls.IN_PROGRESS})


class UserRole(IntEnum):
    """Access level of a staff user."""

    ADMIN = 1
    MODERATOR = 2
    USER = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class LogCategory(str, Enum):
    """Closed set of activity log categories (one per domain event)."""

    # Sessions
    USER_LOGIN = "UserLoginSucceeded"
    USER_LOGOUT = "UserLogout"
    PASSWORD_CHANGED = "PasswordChanged"

    # Projects
    PROJECT_ADDED = "ProjectAdded"
    PROJECT_UPDATED = "ProjectUpdated"
    PROJECT_DELETED = "ProjectDeleted"

    # Users
    USER_ADDED = "UserAdded"
    USER_UPDATED = "UserUpdated"
    USER_DELETED = "UserDeleted"

    # Units
    UNIT_ADDED = "UnitAdded"
    UNIT_UPDATED = "UnitUpdated"
    UNIT_DELETED = "UnitDeleted"

    # Sponsors
    SPONSOR_ADDED = "SponsorAdded"
    SPONSOR_UPDATED = "SponsorUpdated"
    SPONSOR_DELETED = "SponsorDeleted"

    # Progress entries
    PROGRESS_ADDED = "ProgressAdded"
    PROGRESS_UPDATED = "ProgressUpdated"
    PROGRESS_DELETED = "ProgressDeleted"

    # Gantt stages
    GANTT_STAGE_ADDED = "GanttStageAdded"
    GANTT_STAGE_UPDATED = "GanttStageUpdated"
    GANTT_STAGE_DELETED = "GanttStageDeleted"

    # Maintenance
    LOGS_PURGED = "LogsPurged"

    @classmethod
    def session_events(cls) -> frozenset[LogCategory]:
        return frozenset({cls.USER_LOGIN, cls.USER_LOGOUT})

    @property
    def resource(self) -> str:
        """Resource family of the category: "project", "user", "progress", ..."""
        return _CATEGORY_RESOURCES[self]


_CATEGORY_RESOURCES: dict[LogCategory, str] = {
    LogCategory.USER_LOGIN: "session",
    LogCategory.USER_LOGOUT: "session",
    LogCategory.PASSWORD_CHANGED: "user",
    LogCategory.PROJECT_ADDED: "project",
    LogCategory.PROJECT_UPDATED: "project",
    LogCategory.PROJECT_DELETED: "project",
    LogCategory.USER_ADDED: "user",
    LogCategory.USER_UPDATED: "user",
    LogCategory.USER_DELETED: "user",
    LogCategory.UNIT_ADDED: "unit",
    LogCategory.UNIT_UPDATED: "unit",
    LogCategory.UNIT_DELETED: "unit",
    LogCategory.SPONSOR_ADDED: "sponsor",
    LogCategory.SPONSOR_UPDATED: "sponsor",
    LogCategory.SPONSOR_DELETED: "sponsor",
    LogCategory.PROGRESS_ADDED: "progress",
    LogCategory.PROGRESS_UPDATED: "progress",
    LogCategory.PROGRESS_DELETED: "progress",
    LogCategory.GANTT_STAGE_ADDED: "gantt_stage",
    LogCategory.GANTT_STAGE_UPDATED: "gantt_stage",
    LogCategory.GANTT_STAGE_DELETED: "gantt_stage",
    LogCategory.LOGS_PURGED: "maintenance",
}


# Actor credited when no authenticated user is known.
SYSTEM_ACTOR = "System"
