"""Statistics aggregator: derived numeric views over projects, stages and logs.

Pure Python over point-in-time snapshots; every time-dependent function
takes an explicit `now`/`today`. Money uses Decimal rounded to cents,
percentages are floats rounded to one decimal.

Conventions:
  Active projects      planning or in-progress
  Success rate         completed / project count × 100
  Stage completed      end date on or before today
  Percentage change    (current - previous) / previous × 100,
                       ZERO_BASELINE_CHANGE when previous is 0
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from projetrack.models.enums import SYSTEM_ACTOR, LogCategory, ProjectStatus, UserRole
from projetrack.reports.formatters import month_label
from projetrack.schemas.reports import (
    ActorCount,
    CategoryCount,
    DayCount,
    GroupStats,
    LogStatistics,
    MonthBucket,
    MonthOverMonth,
    ProjectSummary,
    RoleCount,
    StageStats,
    UserStats,
)

# Reported change when the previous period had nothing to compare against.
ZERO_BASELINE_CHANGE = 0.0

UNSPECIFIED = "Unspecified"

_ZERO = Decimal("0")


def _money(value: Decimal) -> Decimal:
    """Round to 2 decimal places."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def _label(value: str | None) -> str:
    value = (value or "").strip()
    return value or UNSPECIFIED


def subtract_months(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the month's length."""
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    last = (date(year + month // 12, month % 12 + 1, 1) - timedelta(days=1)).day
    return date(year, month, min(day.day, last))


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


# ── Projects ─────────────────────────────────────────────────────────


def status_rollup(projects: Iterable[Any]) -> dict[int, int]:
    """Project count per status code; every status is present."""
    counts = {status.value: 0 for status in ProjectStatus}
    for project in projects:
        if project.status in counts:
            counts[project.status] += 1
    return counts


def cost_summary(projects: Iterable[Any]) -> tuple[Decimal, Decimal]:
    """(sum, average) over projects that have a cost; average is 0 when none do."""
    costs = [Decimal(str(project.cost)) for project in projects if project.cost is not None]
    total = sum(costs, start=_ZERO)
    average = total / len(costs) if costs else _ZERO
    return _money(total), _money(average)


def summarize_projects(projects: Sequence[Any], user_count: int = 0) -> ProjectSummary:
    statuses = status_rollup(projects)
    total_cost, average_cost = cost_summary(projects)
    return ProjectSummary(
        total=len(projects),
        active=sum(statuses[status.value] for status in ProjectStatus.active()),
        completed=statuses[ProjectStatus.COMPLETED],
        cancelled=statuses[ProjectStatus.CANCELLED],
        pending=statuses[ProjectStatus.PENDING_APPROVAL],
        total_cost=total_cost,
        average_cost=average_cost,
        user_count=user_count,
    )


def _group_stats(name: str, projects: Sequence[Any]) -> GroupStats:
    statuses = status_rollup(projects)
    total_cost, average_cost = cost_summary(projects)
    completed = statuses[ProjectStatus.COMPLETED]
    return GroupStats(
        name=name,
        project_count=len(projects),
        status_counts=statuses,
        active=sum(statuses[status.value] for status in ProjectStatus.active()),
        completed=completed,
        total_cost=total_cost,
        average_cost=average_cost,
        success_rate=_percent(completed, len(projects)),
    )


def _by_count(groups: Iterable[GroupStats]) -> list[GroupStats]:
    return sorted(groups, key=lambda group: (-group.project_count, group.name))


def group_rollup(projects: Iterable[Any], key: Callable[[Any], str | None]) -> list[GroupStats]:
    """Rollup per distinct key value, largest group first. Blank keys group as UNSPECIFIED."""
    groups: dict[str, list[Any]] = defaultdict(list)
    for project in projects:
        groups[_label(key(project))].append(project)
    return _by_count(_group_stats(name, members) for name, members in groups.items())


def rollup_by_department(projects: Iterable[Any]) -> list[GroupStats]:
    return group_rollup(projects, lambda project: project.department)


def rollup_by_directorate(projects: Iterable[Any]) -> list[GroupStats]:
    """Directorate, falling back to the department when it is blank."""
    return group_rollup(
        projects,
        lambda project: (project.directorate or "").strip() or project.department,
    )


def rollup_by_unit(units: Iterable[Any], projects: Iterable[Any]) -> list[GroupStats]:
    """One entry per unit, including units with no projects."""
    owned: dict[Any, list[Any]] = defaultdict(list)
    for project in projects:
        if project.unit_id is not None:
            owned[project.unit_id].append(project)
    return _by_count(_group_stats(unit.name, owned.get(unit.id, [])) for unit in units)


def rollup_by_sponsor(sponsors: Iterable[Any], projects: Sequence[Any]) -> list[GroupStats]:
    """One entry per sponsor; a project counts when its sponsor text contains the name.

    Case-sensitive substring test: "Ada" also matches "Adana Municipality".
    """
    return _by_count(
        _group_stats(
            sponsor.name,
            [project for project in projects if sponsor.name in (project.sponsor or "")],
        )
        for sponsor in sponsors
    )


# ── Months ───────────────────────────────────────────────────────────


def monthly_trend(projects: Iterable[Any], now: datetime, months: int = 12) -> list[MonthBucket]:
    """Projects by start month over the trailing `months`, oldest first.

    Months with no starts are omitted.
    """
    cutoff = subtract_months(now.date(), months)
    buckets: dict[tuple[int, int], list[Any]] = defaultdict(list)
    for project in projects:
        start = project.start_date
        if start is not None and start >= cutoff:
            buckets[(start.year, start.month)].append(project)

    trend = []
    for (year, month), members in sorted(buckets.items()):
        total_cost, average_cost = cost_summary(members)
        trend.append(
            MonthBucket(
                year=year,
                month=month,
                label=month_label(year, month),
                project_count=len(members),
                total_cost=total_cost,
                average_cost=average_cost,
            )
        )
    return trend


def count_by_month(moments: Iterable[date | datetime | None]) -> dict[tuple[int, int], int]:
    counts: Counter[tuple[int, int]] = Counter()
    for moment in moments:
        if moment is not None:
            counts[(moment.year, moment.month)] += 1
    return dict(counts)


def percentage_change(current: int | float, previous: int | float) -> float:
    if previous == 0:
        return ZERO_BASELINE_CHANGE
    return round((current - previous) / previous * 100, 1)


def month_over_month(values_by_month: Mapping[tuple[int, int], int], now: datetime) -> MonthOverMonth:
    """Compare the month containing `now` with the one before it."""
    current_key = (now.year, now.month)
    current = values_by_month.get(current_key, 0)
    previous = values_by_month.get(previous_month(*current_key), 0)
    return MonthOverMonth(
        current=current,
        previous=previous,
        change_percent=percentage_change(current, previous),
    )


# ── Stages ───────────────────────────────────────────────────────────


def is_stage_completed(stage: Any, today: date) -> bool:
    """A stage counts as completed once its end date is today or earlier."""
    return stage.end_date is not None and stage.end_date <= today


def stage_rollup(stages: Iterable[Any], today: date) -> list[StageStats]:
    """Per stage name: how many exist, how many have ended, average planned length."""
    groups: dict[str, list[Any]] = defaultdict(list)
    for stage in stages:
        groups[_label(stage.name)].append(stage)

    stats = []
    for name, members in groups.items():
        completed = sum(1 for s in members if is_stage_completed(s, today))
        durations = [s.duration_days or 0 for s in members]
        stats.append(
            StageStats(
                name=name,
                stage_count=len(members),
                completed=completed,
                completion_percent=_percent(completed, len(members)),
                average_duration_days=round(sum(durations) / len(durations), 1),
            )
        )
    return sorted(stats, key=lambda s: (-s.stage_count, s.name))


# ── Users ────────────────────────────────────────────────────────────


def _role_label(role: int) -> str:
    try:
        return UserRole(role).label
    except ValueError:
        return f"Role {role}"


def role_rollup(users: Iterable[Any]) -> UserStats:
    """User totals per role; `roles` lists only the roles that occur."""
    counts = Counter(int(user.role) for user in users)
    return UserStats(
        total=sum(counts.values()),
        admins=counts[UserRole.ADMIN],
        moderators=counts[UserRole.MODERATOR],
        users=counts[UserRole.USER],
        roles=[
            RoleCount(role=role, label=_role_label(role), count=count)
            for role, count in sorted(counts.items())
        ],
    )


# ── Activity log ─────────────────────────────────────────────────────


def _ranked(counter: Counter[str], limit: int) -> list[tuple[str, int]]:
    """Highest count first, ties alphabetical."""
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return ordered[: max(limit, 0)]


def top_actors(records: Iterable[Any], limit: int = 10) -> list[ActorCount]:
    """Most active actors; the System sentinel and blank actors never rank."""
    counter: Counter[str] = Counter(
        record.actor
        for record in records
        if record.actor and record.actor.strip() and record.actor != SYSTEM_ACTOR
    )
    return [ActorCount(actor=actor, count=count) for actor, count in _ranked(counter, limit)]


def category_distribution(records: Iterable[Any], limit: int = 10) -> list[CategoryCount]:
    counter: Counter[str] = Counter(record.category for record in records)
    return [
        CategoryCount(category=category, count=count)
        for category, count in _ranked(counter, limit)
    ]


def _in_window(records: Iterable[Any], now: datetime, days: int) -> list[Any]:
    start = now - timedelta(days=days)
    return [record for record in records if record.created_at >= start]


def daily_counts(records: Iterable[Any], now: datetime, days: int) -> list[DayCount]:
    """Records per calendar day over the trailing `days`; empty days omitted."""
    counter: Counter[date] = Counter(
        record.created_at.date() for record in _in_window(records, now, days)
    )
    return [DayCount(day=day, count=count) for day, count in sorted(counter.items())]


def log_statistics(
    records: Iterable[Any], now: datetime, days: int = 30, limit: int = 10
) -> LogStatistics:
    window = _in_window(records, now, days)

    by_resource: Counter[str] = Counter()
    by_category: Counter[str] = Counter()
    for record in window:
        by_category[record.category] += 1
        try:
            by_resource[LogCategory(record.category).resource] += 1
        except ValueError:
            continue

    return LogStatistics(
        days=days,
        total=len(window),
        logins=by_category[LogCategory.USER_LOGIN.value],
        logouts=by_category[LogCategory.USER_LOGOUT.value],
        project_actions=by_resource["project"],
        user_actions=by_resource["user"],
        progress_actions=by_resource["progress"],
        daily=daily_counts(window, now, days),
        categories=category_distribution(window, limit),
        top_actors=top_actors(window, limit),
    )
