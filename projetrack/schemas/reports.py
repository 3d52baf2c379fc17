"""Pydantic schemas for aggregator results.

Pure data classes: no business logic. Returned by
`projetrack.reports.aggregator` and serialized as-is by the report routes.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class ProjectSummary(BaseModel):
    """Headline project counts and cost totals."""

    total: int
    active: int
    completed: int
    cancelled: int
    pending: int
    total_cost: Decimal
    average_cost: Decimal
    user_count: int = 0


class GroupStats(BaseModel):
    """Rollup of the projects sharing one grouping key (unit, sponsor, ...)."""

    name: str
    project_count: int
    status_counts: dict[int, int]
    active: int
    completed: int
    total_cost: Decimal
    average_cost: Decimal
    success_rate: float = Field(description="completed / project_count × 100, 1 decimal")


class MonthBucket(BaseModel):
    year: int
    month: int
    label: str
    project_count: int
    total_cost: Decimal
    average_cost: Decimal


class MonthOverMonth(BaseModel):
    current: int
    previous: int
    change_percent: float


class StageStats(BaseModel):
    name: str
    stage_count: int
    completed: int
    completion_percent: float
    average_duration_days: float


class ActorCount(BaseModel):
    actor: str
    count: int


class DayCount(BaseModel):
    day: date
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class LogStatistics(BaseModel):
    """Activity over a trailing window of days."""

    days: int
    total: int
    logins: int
    logouts: int
    project_actions: int
    user_actions: int
    progress_actions: int
    daily: list[DayCount]
    categories: list[CategoryCount]
    top_actors: list[ActorCount]


class RoleCount(BaseModel):
    role: int
    label: str
    count: int


class UserStats(BaseModel):
    """Registered users by role."""

    total: int
    admins: int
    moderators: int
    users: int
    roles: list[RoleCount] = Field(description="Roles present, ordered by role code")
