"""Tests for projetrack/activity/store.py: normalization, queries and purges."""

from __future__ import annotations

import operator
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from projetrack.activity.store import ActivityLogStore, LogFilter, build_record
from projetrack.errors import StoreUnavailableError, ValidationError
from projetrack.models.activity_log import MESSAGE_MAX, USER_AGENT_MAX, ActivityLog
from projetrack.models.enums import SYSTEM_ACTOR
from projetrack.retention import retention_cutoff

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def mock_db():
    """Create a mock async DB session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock()
    return db


# ── build_record ─────────────────────────────────────────────────────


class TestBuildRecord:
    def test_strips_fields(self):
        record = build_record(" ProjectAdded ", "  msg  ", " Ada ")
        assert (record.category, record.message, record.actor) == ("ProjectAdded", "msg", "Ada")

    def test_blank_actor_is_system(self):
        assert build_record("ProjectAdded", "msg", None).actor == SYSTEM_ACTOR
        assert build_record("ProjectAdded", "msg", "").actor == SYSTEM_ACTOR

    def test_truncates_long_text(self):
        record = build_record("ProjectAdded", "x" * 5000, "Ada", user_agent="u" * 500)
        assert len(record.message) == MESSAGE_MAX
        assert len(record.user_agent) == USER_AGENT_MAX

    def test_blank_optional_fields_are_none(self):
        record = build_record("ProjectAdded", "msg", "Ada", ip=" ", extra="")
        assert record.ip_address is None
        assert record.extra is None

    def test_blank_category_rejected(self):
        with pytest.raises(ValidationError):
            build_record("  ", "msg", "Ada")

    def test_blank_message_rejected(self):
        with pytest.raises(ValidationError):
            build_record("ProjectAdded", " ", "Ada")

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError, match="Unknown log category"):
            build_record("ProjectArchived", "msg", "Ada")

    def test_overlong_category_rejected(self):
        with pytest.raises(ValidationError, match="Unknown log category"):
            build_record("X" * 80, "msg", "Ada")


# ── append / query ───────────────────────────────────────────────────


class TestAppend:
    @pytest.mark.asyncio
    async def test_flushes(self, mock_db):
        record = build_record("ProjectAdded", "msg", "Ada")
        await ActivityLogStore(mock_db).append(record)
        mock_db.add.assert_called_once_with(record)
        mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_error_is_store_unavailable(self, mock_db):
        mock_db.flush.side_effect = OperationalError("INSERT", {}, Exception("down"))
        with pytest.raises(StoreUnavailableError):
            await ActivityLogStore(mock_db).append(build_record("ProjectAdded", "msg", "Ada"))


class TestQuery:
    @pytest.mark.asyncio
    async def test_returns_page_and_total(self, mock_db):
        rows = [MagicMock(spec=ActivityLog), MagicMock(spec=ActivityLog)]
        count_result = MagicMock()
        count_result.scalar.return_value = 120
        rows_result = MagicMock()
        rows_result.scalars.return_value.all.return_value = rows
        mock_db.execute.side_effect = [count_result, rows_result]

        records, total = await ActivityLogStore(mock_db).query(LogFilter(), page=3, page_size=25)

        assert total == 120
        assert records == rows
        page_query = mock_db.execute.call_args_list[1].args[0]
        assert page_query._limit == 25
        assert page_query._offset == 50

    @pytest.mark.asyncio
    async def test_page_below_one_is_first_page(self, mock_db):
        count_result = MagicMock()
        count_result.scalar.return_value = 0
        rows_result = MagicMock()
        rows_result.scalars.return_value.all.return_value = []
        mock_db.execute.side_effect = [count_result, rows_result]

        await ActivityLogStore(mock_db).query(page=0, page_size=10)
        assert mock_db.execute.call_args_list[1].args[0]._offset == 0

    def test_filter_clauses(self):
        filters = LogFilter(
            category="ProjectAdded",
            actor="Ada",
            search="Apollo",
            start=NOW - timedelta(days=1),
            end=NOW,
        )
        sql = str(filters.apply(select(ActivityLog)))
        assert "activity_log.category =" in sql
        assert "activity_log.actor LIKE" in sql
        assert "activity_log.message LIKE" in sql
        assert "activity_log.created_at >=" in sql
        assert "activity_log.created_at <=" in sql

    def test_empty_filter_adds_no_where(self):
        assert "WHERE" not in str(LogFilter().apply(select(ActivityLog)))


# ── Deletes ──────────────────────────────────────────────────────────


class TestDeleteOlderThan:
    @pytest.mark.asyncio
    async def test_strictly_older_than_cutoff(self, mock_db):
        result = MagicMock()
        result.rowcount = 2
        mock_db.execute.return_value = result
        cutoff = retention_cutoff(30, NOW)

        count = await ActivityLogStore(mock_db).delete_older_than(cutoff)

        assert count == 2
        statement = mock_db.execute.call_args.args[0]
        assert statement.whereclause.operator is operator.lt
        assert statement.whereclause.right.value == cutoff

    @pytest.mark.asyncio
    async def test_deletes_only_records_past_cutoff(self, mock_db):
        """The DELETE predicate, applied to stored ages, removes 40d and 400d only."""
        rows = [NOW - timedelta(days=days) for days in (10, 40, 400)]

        async def execute(statement):
            clause = statement.whereclause
            bound = clause.right.value
            deleted = [created for created in rows if clause.operator(created, bound)]
            for created in deleted:
                rows.remove(created)
            result = MagicMock()
            result.rowcount = len(deleted)
            return result

        mock_db.execute.side_effect = execute

        count = await ActivityLogStore(mock_db).delete_older_than(retention_cutoff(30, NOW))

        assert count == 2
        assert rows == [NOW - timedelta(days=10)]


class TestDeleteById:
    @pytest.mark.asyncio
    async def test_found(self, mock_db):
        result = MagicMock()
        result.rowcount = 1
        mock_db.execute.return_value = result
        assert await ActivityLogStore(mock_db).delete_by_id(uuid.uuid4()) is True

    @pytest.mark.asyncio
    async def test_missing(self, mock_db):
        result = MagicMock()
        result.rowcount = 0
        mock_db.execute.return_value = result
        assert await ActivityLogStore(mock_db).delete_by_id(uuid.uuid4()) is False
