"""SQLAlchemy declarative base and shared mixins.

Domain tables get `id`, `created_at`, and `updated_at` via TimestampMixin.
The activity log only takes IdentityMixin + CreatedAtMixin: its rows are
never updated, so it carries no `updated_at` column.

Timestamps get a Python-side default as well as the server default so the
value is populated on the instance right after flush (no refresh round trip
under asyncio).
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current instant used for every stored timestamp."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class IdentityMixin:
    """UUID primary key, generated client-side so it is known before commit."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )


class CreatedAtMixin:
    """Insert timestamp; the sort key for anything shown newest-first."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )


class TimestampMixin(IdentityMixin, CreatedAtMixin):
    """id + created_at + updated_at for mutable domain tables."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
