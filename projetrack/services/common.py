"""Helpers shared by the mutation services."""

from __future__ import annotations

import logging
import uuid
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def commit(db: AsyncSession, action: str) -> None:
    """Commit the pending mutation or roll it back and raise StoreError."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Commit failed during %s", action)
        raise StoreError("Server error") from exc


async def get_or_404(db: AsyncSession, model: type[T], entity_id: uuid.UUID, label: str) -> T:
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


def required(value: str | None, label: str) -> str:
    """Stripped value of a required text field."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


async def count(db: AsyncSession, column: Any, *where: Any) -> int:
    result = await db.execute(select(func.count(column)).where(*where))
    return result.scalar() or 0
