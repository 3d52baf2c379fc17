"""Sponsor model.

Projects name their sponsor in free text; there is no key relation. Reports
and the delete guard match a sponsor to projects by substring.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from projetrack.models.base import Base, TimestampMixin


class Sponsor(TimestampMixin, Base):
    __tablename__ = "sponsors"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    unit_name: Mapped[str | None] = mapped_column(String(200))
    contact_info: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(String(1000))

    def __repr__(self) -> str:
        return f"<Sponsor name={self.name}>"
