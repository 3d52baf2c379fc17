"""Tests for projetrack/reports/aggregator.py: rollups, trends and rankings."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from projetrack.models.enums import SYSTEM_ACTOR, LogCategory, ProjectStatus, UserRole
from projetrack.reports.aggregator import (
    UNSPECIFIED,
    ZERO_BASELINE_CHANGE,
    category_distribution,
    cost_summary,
    count_by_month,
    daily_counts,
    group_rollup,
    is_stage_completed,
    log_statistics,
    month_over_month,
    monthly_trend,
    percentage_change,
    role_rollup,
    rollup_by_department,
    rollup_by_directorate,
    rollup_by_sponsor,
    rollup_by_unit,
    stage_rollup,
    status_rollup,
    subtract_months,
    summarize_projects,
    top_actors,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


# ── Helpers ──────────────────────────────────────────────────────────


def _project(
    status=ProjectStatus.PLANNING,
    cost=None,
    department="IT",
    directorate=None,
    unit_id=None,
    sponsor=None,
    start_date=None,
):
    return SimpleNamespace(
        status=int(status),
        cost=cost,
        department=department,
        directorate=directorate,
        unit_id=unit_id,
        sponsor=sponsor,
        start_date=start_date,
    )


def _record(actor="Ada", category=LogCategory.PROJECT_ADDED.value, age=timedelta(hours=1)):
    return SimpleNamespace(actor=actor, category=category, created_at=NOW - age)


def _stage(name, end_date=None, duration_days=0):
    return SimpleNamespace(name=name, end_date=end_date, duration_days=duration_days)


# ── Project rollups ──────────────────────────────────────────────────


class TestStatusRollup:
    def test_every_status_present(self):
        counts = status_rollup([])
        assert counts == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}

    def test_counts(self):
        projects = [
            _project(ProjectStatus.COMPLETED),
            _project(ProjectStatus.COMPLETED),
            _project(ProjectStatus.CANCELLED),
        ]
        counts = status_rollup(projects)
        assert counts[ProjectStatus.COMPLETED] == 2
        assert counts[ProjectStatus.CANCELLED] == 1
        assert counts[ProjectStatus.PLANNING] == 0


class TestCostSummary:
    def test_only_cost_bearing_projects_averaged(self):
        projects = [_project(cost=Decimal("100")), _project(cost=Decimal("300")), _project()]
        total, average = cost_summary(projects)
        assert total == Decimal("400.00")
        assert average == Decimal("200.00")

    def test_no_costs(self):
        assert cost_summary([_project(), _project()]) == (Decimal("0"), Decimal("0"))

    def test_rounds_to_cents(self):
        projects = [_project(cost=Decimal("10")), _project(cost=Decimal("10")), _project(cost=Decimal("11"))]
        _, average = cost_summary(projects)
        assert average == Decimal("10.33")


class TestSummarizeProjects:
    def test_headline_counts(self):
        projects = [
            _project(ProjectStatus.PENDING_APPROVAL),
            _project(ProjectStatus.PLANNING, cost=Decimal("50")),
            _project(ProjectStatus.IN_PROGRESS, cost=Decimal("150")),
            _project(ProjectStatus.COMPLETED),
            _project(ProjectStatus.CANCELLED),
        ]
        summary = summarize_projects(projects)
        assert summary.total == 5
        assert summary.active == 2
        assert summary.completed == 1
        assert summary.cancelled == 1
        assert summary.pending == 1
        assert summary.total_cost == Decimal("200.00")
        assert summary.average_cost == Decimal("100.00")
        assert summary.user_count == 0

    def test_user_count_passed_through(self):
        assert summarize_projects([], user_count=7).user_count == 7


class TestGroupRollup:
    def test_sorted_by_count_descending(self):
        projects = [_project(department="A"), _project(department="B"), _project(department="B")]
        groups = rollup_by_department(projects)
        assert [g.name for g in groups] == ["B", "A"]
        assert [g.project_count for g in groups] == [2, 1]

    def test_blank_key_is_unspecified(self):
        groups = rollup_by_department([_project(department="  "), _project(department="")])
        assert len(groups) == 1
        assert groups[0].name == UNSPECIFIED
        assert groups[0].project_count == 2

    def test_success_rate_one_decimal(self):
        projects = [
            _project(ProjectStatus.COMPLETED),
            _project(ProjectStatus.PLANNING),
            _project(ProjectStatus.IN_PROGRESS),
        ]
        (group,) = group_rollup(projects, lambda p: "All")
        assert group.success_rate == 33.3
        assert group.active == 2
        assert group.completed == 1
        assert group.status_counts[ProjectStatus.PLANNING] == 1

    def test_directorate_falls_back_to_department(self):
        projects = [
            _project(department="Roads", directorate="Infrastructure"),
            _project(department="Parks", directorate=None),
        ]
        names = {g.name for g in rollup_by_directorate(projects)}
        assert names == {"Infrastructure", "Parks"}


class TestRollupByUnit:
    def test_units_without_projects_listed(self):
        busy = SimpleNamespace(id=uuid.uuid4(), name="Busy")
        idle = SimpleNamespace(id=uuid.uuid4(), name="Idle")
        projects = [_project(unit_id=busy.id), _project(unit_id=busy.id), _project()]

        groups = rollup_by_unit([idle, busy], projects)
        assert [(g.name, g.project_count) for g in groups] == [("Busy", 2), ("Idle", 0)]
        assert groups[1].success_rate == 0.0


class TestRollupBySponsor:
    def test_substring_match(self):
        sponsors = [SimpleNamespace(name="City Council"), SimpleNamespace(name="Port")]
        projects = [
            _project(sponsor="City Council; Port Authority"),
            _project(sponsor="City Council"),
            _project(sponsor=None),
        ]
        groups = {g.name: g.project_count for g in rollup_by_sponsor(sponsors, projects)}
        assert groups == {"City Council": 2, "Port": 1}

    def test_match_is_case_sensitive(self):
        groups = rollup_by_sponsor([SimpleNamespace(name="Port")], [_project(sponsor="port office")])
        assert groups[0].project_count == 0

    def test_accepts_false_positive_on_longer_name(self):
        groups = rollup_by_sponsor([SimpleNamespace(name="Ada")], [_project(sponsor="Adana Municipality")])
        assert groups[0].project_count == 1


# ── Months ───────────────────────────────────────────────────────────


class TestSubtractMonths:
    def test_same_day(self):
        assert subtract_months(date(2025, 6, 15), 12) == date(2024, 6, 15)

    def test_clamps_to_month_end(self):
        assert subtract_months(date(2025, 3, 31), 1) == date(2025, 2, 28)

    def test_across_year(self):
        assert subtract_months(date(2025, 1, 10), 2) == date(2024, 11, 10)

    def test_leap_day(self):
        assert subtract_months(date(2024, 2, 29), 12) == date(2023, 2, 28)


class TestMonthlyTrend:
    def test_sparse_ascending_within_window(self):
        projects = [
            _project(start_date=date(2025, 1, 5), cost=Decimal("10")),
            _project(start_date=date(2025, 1, 20), cost=Decimal("30")),
            _project(start_date=date(2024, 6, 20)),
            _project(start_date=date(2024, 6, 10)),  # before the window
            _project(start_date=None),
        ]
        trend = monthly_trend(projects, NOW, months=12)

        assert [(b.year, b.month, b.project_count) for b in trend] == [(2024, 6, 1), (2025, 1, 2)]
        assert trend[0].label == "June 2024"
        assert trend[1].total_cost == Decimal("40.00")
        assert trend[1].average_cost == Decimal("20.00")

    def test_empty(self):
        assert monthly_trend([], NOW) == []


class TestPercentageChange:
    def test_increase(self):
        assert percentage_change(15, 10) == 50.0

    def test_decrease(self):
        assert percentage_change(5, 10) == -50.0

    def test_one_decimal(self):
        assert percentage_change(1, 3) == -66.7

    def test_zero_baseline(self):
        assert percentage_change(7, 0) == ZERO_BASELINE_CHANGE
        assert percentage_change(0, 0) == ZERO_BASELINE_CHANGE


class TestMonthOverMonth:
    def test_compares_with_previous_month(self):
        values = {(2025, 6): 6, (2025, 5): 4, (2025, 4): 100}
        result = month_over_month(values, NOW)
        assert (result.current, result.previous, result.change_percent) == (6, 4, 50.0)

    def test_january_compares_with_december(self):
        now = datetime(2025, 1, 3, tzinfo=UTC)
        result = month_over_month({(2024, 12): 2, (2025, 1): 1}, now)
        assert result.previous == 2
        assert result.change_percent == -50.0

    def test_missing_months_are_zero(self):
        result = month_over_month({}, NOW)
        assert (result.current, result.previous) == (0, 0)
        assert result.change_percent == ZERO_BASELINE_CHANGE

    def test_count_by_month_skips_none(self):
        counts = count_by_month([date(2025, 6, 1), date(2025, 6, 30), None, date(2025, 5, 2)])
        assert counts == {(2025, 6): 2, (2025, 5): 1}


# ── Stages ───────────────────────────────────────────────────────────


class TestStageRollup:
    def test_completion_and_duration(self):
        today = date(2025, 6, 15)
        stages = [
            _stage("Design", end_date=date(2025, 6, 15), duration_days=10),
            _stage("Design", end_date=date(2025, 7, 1), duration_days=20),
            _stage("Design", end_date=None, duration_days=3),
            _stage("Launch", end_date=date(2025, 1, 1), duration_days=1),
        ]
        rollup = stage_rollup(stages, today)

        assert [s.name for s in rollup] == ["Design", "Launch"]
        design = rollup[0]
        assert design.stage_count == 3
        assert design.completed == 1
        assert design.completion_percent == 33.3
        assert design.average_duration_days == 11.0
        assert rollup[1].completion_percent == 100.0

    def test_completed_boundary(self):
        today = date(2025, 6, 15)
        assert is_stage_completed(_stage("A", end_date=today), today) is True
        assert is_stage_completed(_stage("A", end_date=date(2025, 6, 16)), today) is False
        assert is_stage_completed(_stage("A"), today) is False


# ── Users ────────────────────────────────────────────────────────────


class TestRoleRollup:
    def test_counts_per_role(self):
        users = [
            SimpleNamespace(role=UserRole.USER),
            SimpleNamespace(role=UserRole.ADMIN),
            SimpleNamespace(role=UserRole.USER),
            SimpleNamespace(role=UserRole.USER),
        ]
        stats = role_rollup(users)

        assert stats.total == 4
        assert (stats.admins, stats.moderators, stats.users) == (1, 0, 3)
        assert [(r.role, r.label, r.count) for r in stats.roles] == [
            (1, "Admin", 1),
            (3, "User", 3),
        ]

    def test_unknown_role_still_counted(self):
        stats = role_rollup([SimpleNamespace(role=9)])
        assert stats.total == 1
        assert stats.roles[0].label == "Role 9"

    def test_no_users(self):
        stats = role_rollup([])
        assert stats.total == 0
        assert stats.roles == []


# ── Activity log ─────────────────────────────────────────────────────


class TestTopActors:
    def test_excludes_system(self):
        records = (
            [_record("A")] * 5 + [_record(SYSTEM_ACTOR)] * 100 + [_record("B")] * 3
        )
        ranking = top_actors(records, limit=2)
        assert [(r.actor, r.count) for r in ranking] == [("A", 5), ("B", 3)]

    def test_excludes_blank(self):
        ranking = top_actors([_record(""), _record("  "), _record("C")], limit=10)
        assert [r.actor for r in ranking] == ["C"]

    def test_ties_alphabetical(self):
        ranking = top_actors([_record("Zed"), _record("Amy")], limit=10)
        assert [r.actor for r in ranking] == ["Amy", "Zed"]


class TestDailyCounts:
    def test_sparse_ascending_within_window(self):
        records = [
            _record(age=timedelta(hours=1)),
            _record(age=timedelta(hours=2)),
            _record(age=timedelta(days=2)),
            _record(age=timedelta(days=40)),
        ]
        days = daily_counts(records, NOW, days=30)
        assert [(d.day, d.count) for d in days] == [
            (date(2025, 6, 13), 1),
            (date(2025, 6, 15), 2),
        ]


class TestCategoryDistribution:
    def test_limit_and_order(self):
        records = (
            [_record(category="A")] * 3 + [_record(category="B")] * 2 + [_record(category="C")]
        )
        dist = category_distribution(records, limit=2)
        assert [(c.category, c.count) for c in dist] == [("A", 3), ("B", 2)]


class TestLogStatistics:
    def test_counts_by_family(self):
        records = [
            _record(category=LogCategory.USER_LOGIN.value),
            _record(category=LogCategory.USER_LOGIN.value),
            _record(category=LogCategory.USER_LOGOUT.value),
            _record(category=LogCategory.PROJECT_ADDED.value),
            _record(category=LogCategory.PROJECT_DELETED.value),
            _record(category=LogCategory.USER_ADDED.value),
            _record(category=LogCategory.PASSWORD_CHANGED.value),
            _record(category=LogCategory.PROGRESS_UPDATED.value),
            _record(category=LogCategory.PROJECT_ADDED.value, age=timedelta(days=31)),
        ]
        stats = log_statistics(records, NOW, days=30)

        assert stats.total == 8
        assert stats.logins == 2
        assert stats.logouts == 1
        assert stats.project_actions == 2
        assert stats.user_actions == 2
        assert stats.progress_actions == 1
        assert stats.categories[0].category == LogCategory.USER_LOGIN.value
        assert stats.top_actors[0].count == 8

    def test_unknown_category_still_counted(self):
        stats = log_statistics([_record(category="LegacyEvent")], NOW, days=30)
        assert stats.total == 1
        assert stats.project_actions == 0
