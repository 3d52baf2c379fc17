"""User management and password changes."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from projetrack.activity.logger import activity_logger
from projetrack.auth.dependencies import RequestContext
from projetrack.auth.passwords import hash_password, verify_password
from projetrack.errors import AuthenticationError, ValidationError
from projetrack.models.enums import UserRole
from projetrack.models.user import User
from projetrack.schemas.requests import PasswordChange, UserCreate, UserUpdate
from projetrack.services.common import commit, count, get_or_404, required

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _validate_role(role: int) -> int:
    try:
        return UserRole(role).value
    except ValueError:
        msg = f"Invalid user role: {role}"
        raise ValidationError(msg) from None


def _validate_password(password: str | None) -> str:
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        msg = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        raise ValidationError(msg)
    return password


class UserService:
    async def list_all(self, db: AsyncSession) -> list[User]:
        result = await db.execute(select(User).order_by(User.full_name))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        return await get_or_404(db, User, user_id, "User")

    async def get_by_staff_id(self, db: AsyncSession, staff_id: str) -> User | None:
        result = await db.execute(select(User).where(User.staff_id == staff_id))
        return result.scalars().first()

    async def _ensure_unique(
        self, db: AsyncSession, staff_id: str, exclude: uuid.UUID | None = None
    ) -> None:
        where = [func.lower(User.staff_id) == staff_id.lower()]
        if exclude is not None:
            where.append(User.id != exclude)
        if await count(db, User.id, *where):
            raise ValidationError(f"Staff id '{staff_id}' is already registered")

    async def create(self, db: AsyncSession, ctx: RequestContext, data: UserCreate) -> User:
        full_name = required(data.full_name, "Full name")
        staff_id = required(data.staff_id, "Staff id")
        password = _validate_password(data.password)
        role = _validate_role(data.role)
        await self._ensure_unique(db, staff_id)

        user = User(
            full_name=full_name,
            staff_id=staff_id,
            password_hash=hash_password(password),
            role=role,
        )
        db.add(user)
        await commit(db, "user create")
        logger.info("User added: %s (by %s)", staff_id, ctx.actor)

        await activity_logger.user_added(staff_id, ctx.actor, ctx.ip)
        return user

    async def update(
        self, db: AsyncSession, ctx: RequestContext, user_id: uuid.UUID, data: UserUpdate
    ) -> User:
        user = await self.get(db, user_id)
        changes = data.model_dump(exclude_unset=True)

        if "full_name" in changes:
            user.full_name = required(changes["full_name"], "Full name")
        if "staff_id" in changes:
            staff_id = required(changes["staff_id"], "Staff id")
            await self._ensure_unique(db, staff_id, exclude=user.id)
            user.staff_id = staff_id
        if changes.get("role") is not None:
            user.role = _validate_role(changes["role"])
        if changes.get("password"):
            user.password_hash = hash_password(_validate_password(changes["password"]))

        await commit(db, "user update")
        logger.info("User updated: %s (by %s)", user.staff_id, ctx.actor)

        await activity_logger.user_updated(user.staff_id, ctx.actor, ctx.ip)
        return user

    async def delete(self, db: AsyncSession, ctx: RequestContext, user_id: uuid.UUID) -> None:
        user = await self.get(db, user_id)
        if ctx.identity is not None and ctx.identity.user_id == user.id:
            raise ValidationError("You cannot delete your own account")

        staff_id = user.staff_id
        await db.delete(user)
        await commit(db, "user delete")
        logger.info("User deleted: %s (by %s)", staff_id, ctx.actor)

        await activity_logger.user_deleted(staff_id, ctx.actor, ctx.ip)

    async def change_password(
        self, db: AsyncSession, ctx: RequestContext, data: PasswordChange
    ) -> None:
        """Change the caller's own password after verifying the current one."""
        if ctx.identity is None:
            raise AuthenticationError("Authentication required")
        if not data.old_password:
            raise ValidationError("Current password is required")
        new_password = _validate_password(data.new_password)

        user = await self.get(db, ctx.identity.user_id)
        if not verify_password(data.old_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await commit(db, "password change")
        logger.info("Password changed: %s", user.staff_id)

        await activity_logger.password_changed(user.staff_id, user.full_name, ctx.ip)


user_service = UserService()
