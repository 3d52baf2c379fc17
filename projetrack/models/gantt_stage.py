"""GanttStage model: one planned phase of a project."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projetrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from projetrack.models.progress_entry import ProgressEntry
    from projetrack.models.project import Project


class GanttStage(TimestampMixin, Base):
    __tablename__ = "gantt_stages"

    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, default=1, nullable=False)

    project: Mapped[Project] = relationship("Project", back_populates="stages")
    progress_entries: Mapped[list[ProgressEntry]] = relationship(
        "ProgressEntry", back_populates="stage", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<GanttStage name={self.name} order={self.order}>"
