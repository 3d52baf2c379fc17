"""ProgressEntry model: a dated progress report against a project stage."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projetrack.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from projetrack.models.gantt_stage import GanttStage
    from projetrack.models.project import Project
    from projetrack.models.user import User


class ProgressEntry(TimestampMixin, Base):
    __tablename__ = "progress_entries"

    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("gantt_stages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    percent_complete: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    entry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    # Author (nullable: users may be deleted, entries stay)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )

    project: Mapped[Project] = relationship("Project", back_populates="progress_entries")
    stage: Mapped[GanttStage] = relationship("GanttStage", back_populates="progress_entries")
    author: Mapped[User | None] = relationship("User")

    def __repr__(self) -> str:
        return f"<ProgressEntry title={self.title} percent={self.percent_complete}>"
