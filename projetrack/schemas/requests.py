"""Request bodies for the JSON API.

Only types are enforced here; required fields, ranges and references are
checked by the services so every client error shares one message format.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


# ── Auth ─────────────────────────────────────────────────────────────


class LoginRequest(_Body):
    staff_id: str = ""
    password: str = ""


class PasswordChange(_Body):
    old_password: str = ""
    new_password: str = ""


# ── Projects ─────────────────────────────────────────────────────────


class ProjectCreate(_Body):
    name: str = ""
    department: str = ""
    directorate: str | None = None
    unit_id: uuid.UUID | None = None
    purpose: str | None = None
    scope: str | None = None
    team: str | None = None
    success_criteria: str | None = None
    sponsor: str | None = None
    cost: Decimal | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: int = 1
    staff_count: int = 0


class ProjectUpdate(_Body):
    """Partial update: only fields present in the body are applied."""

    name: str | None = None
    department: str | None = None
    directorate: str | None = None
    unit_id: uuid.UUID | None = None
    purpose: str | None = None
    scope: str | None = None
    team: str | None = None
    success_criteria: str | None = None
    sponsor: str | None = None
    cost: Decimal | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: int | None = None
    staff_count: int | None = None


# ── Units / sponsors ─────────────────────────────────────────────────


class UnitIn(_Body):
    name: str = ""


class SponsorIn(_Body):
    name: str = ""
    unit_name: str | None = None
    contact_info: str | None = None
    description: str | None = None


# ── Users ────────────────────────────────────────────────────────────


class UserCreate(_Body):
    full_name: str = ""
    staff_id: str = ""
    password: str = ""
    role: int = 3


class UserUpdate(_Body):
    full_name: str | None = None
    staff_id: str | None = None
    password: str | None = None
    role: int | None = None


# ── Progress ─────────────────────────────────────────────────────────


class ProgressCreate(_Body):
    project_id: uuid.UUID
    stage_id: uuid.UUID
    title: str = ""
    percent_complete: int = 0
    entry_date: datetime | None = None
    description: str | None = None


class ProgressUpdate(_Body):
    stage_id: uuid.UUID | None = None
    title: str | None = None
    percent_complete: int | None = None
    entry_date: datetime | None = None
    description: str | None = None


class StageCreate(_Body):
    project_id: uuid.UUID
    name: str = ""
    start_date: date | None = None
    end_date: date | None = None
    duration_days: int | None = None
    order: int = Field(default=1)


class StageUpdate(_Body):
    name: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    duration_days: int | None = None
    order: int | None = None
