"""Response shapes: entity views and pagination metadata."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class _View(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UnitView(_View):
    id: uuid.UUID
    name: str


class SponsorView(_View):
    id: uuid.UUID
    name: str
    unit_name: str | None = None
    contact_info: str | None = None
    description: str | None = None


class UserView(_View):
    id: uuid.UUID
    full_name: str
    staff_id: str
    role: int


class ProjectView(_View):
    id: uuid.UUID
    name: str
    department: str
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
    status: int
    staff_count: int
    created_at: datetime | None = None


class StageView(_View):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    start_date: date | None = None
    end_date: date | None = None
    duration_days: int
    order: int


class ProgressView(_View):
    id: uuid.UUID
    project_id: uuid.UUID
    stage_id: uuid.UUID
    title: str
    percent_complete: int
    entry_date: datetime
    description: str | None = None
    user_id: uuid.UUID | None = None


class LogView(_View):
    id: uuid.UUID
    category: str
    message: str
    actor: str
    created_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    extra: str | None = None


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> Pagination:
        pages = (total + page_size - 1) // page_size if page_size else 0
        return cls(page=page, page_size=page_size, total=total, total_pages=pages)

