"""Project model: the central tracked entity.

`sponsor` is free text (matched to Sponsor rows by substring), `unit_id` is
a real foreign key. Stages and progress entries are removed with the project.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projetrack.models.base import Base, TimestampMixin
from projetrack.models.enums import ProjectStatus

if TYPE_CHECKING:
    from projetrack.models.gantt_stage import GanttStage
    from projetrack.models.progress_entry import ProgressEntry
    from projetrack.models.unit import Unit


class Project(TimestampMixin, Base):
    """A tracked project."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Ownership
    department: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    directorate: Mapped[str | None] = mapped_column(String(200))
    unit_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("units.id"), index=True
    )

    # Description
    purpose: Mapped[str | None] = mapped_column(Text)
    scope: Mapped[str | None] = mapped_column(Text)
    team: Mapped[str | None] = mapped_column(Text)
    success_criteria: Mapped[str | None] = mapped_column(Text)
    sponsor: Mapped[str | None] = mapped_column(String(500), comment="Free text, not a key")

    # Plan
    cost: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    start_date: Mapped[date | None] = mapped_column(Date, index=True)
    end_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[int] = mapped_column(
        Integer, default=ProjectStatus.PENDING_APPROVAL.value, nullable=False, index=True
    )
    staff_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    unit: Mapped[Unit | None] = relationship("Unit", back_populates="projects")
    stages: Mapped[list[GanttStage]] = relationship(
        "GanttStage",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    progress_entries: Mapped[list[ProgressEntry]] = relationship(
        "ProgressEntry",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Project name={self.name} status={self.status}>"
