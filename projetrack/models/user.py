"""User model: a staff member who signs in and performs administrative actions.

`full_name` is the display name credited as the actor in the activity log.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from projetrack.models.base import Base, TimestampMixin
from projetrack.models.enums import UserRole


class User(TimestampMixin, Base):
    """A staff user."""

    __tablename__ = "users"

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    staff_id: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True, comment="Login identifier"
    )
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False, comment="bcrypt")
    role: Mapped[int] = mapped_column(Integer, default=UserRole.USER.value, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User staff_id={self.staff_id} role={self.role}>"
