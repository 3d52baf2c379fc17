"""SQLAlchemy ORM models for ProjeTrack.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from projetrack.models.activity_log import ActivityLog
from projetrack.models.base import Base
from projetrack.models.enums import SYSTEM_ACTOR, LogCategory, ProjectStatus, UserRole
from projetrack.models.gantt_stage import GanttStage
from projetrack.models.progress_entry import ProgressEntry
from projetrack.models.project import Project
from projetrack.models.sponsor import Sponsor
from projetrack.models.unit import Unit
from projetrack.models.user import User

__all__ = [
    # Base
    "Base",
    # Models
    "ActivityLog",
    "Project",
    "GanttStage",
    "ProgressEntry",
    "User",
    "Sponsor",
    "Unit",
    # Enums
    "LogCategory",
    "ProjectStatus",
    "UserRole",
    "SYSTEM_ACTOR",
]
