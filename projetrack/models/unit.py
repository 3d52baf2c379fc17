"""Unit model: an organizational unit that owns projects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projetrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from projetrack.models.project import Project


class Unit(TimestampMixin, Base):
    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    projects: Mapped[list[Project]] = relationship(
        "Project", back_populates="unit", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Unit name={self.name}>"
