"""ActivityLog model: one immutable audit entry per administrative action.

Rows reference domain entities only through the actor name and the message
text (no foreign keys), so the trail outlives the entities it describes.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from projetrack.models.base import Base, CreatedAtMixin, IdentityMixin

# Column bounds, shared with the store's input normalization.
CATEGORY_MAX = 50
MESSAGE_MAX = 1000
ACTOR_MAX = 100
IP_MAX = 50
USER_AGENT_MAX = 200
EXTRA_MAX = 200


class ActivityLog(IdentityMixin, CreatedAtMixin, Base):
    """Append-only audit trail entry."""

    __tablename__ = "activity_log"

    category: Mapped[str] = mapped_column(String(CATEGORY_MAX), nullable=False, index=True)
    message: Mapped[str] = mapped_column(String(MESSAGE_MAX), nullable=False)
    actor: Mapped[str] = mapped_column(
        String(ACTOR_MAX), nullable=False, index=True, comment="User display name or 'System'"
    )

    # Request context (optional)
    ip_address: Mapped[str | None] = mapped_column(String(IP_MAX))
    user_agent: Mapped[str | None] = mapped_column(String(USER_AGENT_MAX))
    extra: Mapped[str | None] = mapped_column(String(EXTRA_MAX), comment="Free-form supplementary text")

    def __repr__(self) -> str:
        return f"<ActivityLog category={self.category} actor={self.actor}>"
