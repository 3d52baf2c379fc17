"""HTTP integration tests for the JSON API.

Database sessions and identities are injected through dependency overrides;
services are patched where a route would otherwise reach PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from projetrack.auth.dependencies import Identity, RequestContext, get_request_context
from projetrack.config import settings
from projetrack.db.engine import get_session
from projetrack.errors import NotFoundError, ReferentialConflictError, StoreError
from projetrack.main import app
from projetrack.models.enums import UserRole
from projetrack.schemas.reports import ProjectSummary, RoleCount, UserStats

ADMIN = Identity(user_id=uuid.uuid4(), full_name="Ada", staff_id="S-1", role=UserRole.ADMIN)
STAFF = Identity(user_id=uuid.uuid4(), full_name="Grace", staff_id="S-2", role=UserRole.USER)


def _log(**fields):
    defaults = {
        "id": uuid.uuid4(),
        "category": "ProjectAdded",
        "message": "'Apollo' project added",
        "actor": "Ada",
        "created_at": datetime(2025, 6, 15, 12, 0, tzinfo=UTC),
        "ip_address": "10.0.0.1",
        "user_agent": None,
        "extra": None,
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


@pytest.fixture
def db():
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def as_identity(db):
    """Returns a function that sets the caller identity (None = anonymous)."""

    async def _session():
        yield db

    def _set(identity: Identity | None):
        ctx = RequestContext(identity=identity, ip="10.0.0.1", user_agent="pytest")
        app.dependency_overrides[get_request_context] = lambda: ctx

    app.dependency_overrides[get_session] = _session
    _set(None)
    yield _set
    app.dependency_overrides.clear()


@pytest.fixture
def client(as_identity):
    return TestClient(app, raise_server_exceptions=False)


# ── Authentication gates ─────────────────────────────────────────────


class TestAccessControl:
    def test_anonymous_rejected(self, client):
        response = client.get("/api/units")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_admin_cannot_read_logs(self, client, as_identity):
        as_identity(STAFF)
        response = client.get("/api/logs")
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_me(self, client, as_identity):
        as_identity(STAFF)
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["full_name"] == "Grace"
        assert body["data"]["is_admin"] is False


# ── Error envelope ───────────────────────────────────────────────────


class TestErrorEnvelope:
    def test_conflict_reports_dependents(self, client, as_identity):
        as_identity(ADMIN)
        error = ReferentialConflictError("Unit 'Ops' is used by 3 project(s)", dependents=3)
        with patch(
            "projetrack.api.units.unit_service.delete", new_callable=AsyncMock, side_effect=error
        ):
            response = client.delete(f"/api/units/{uuid.uuid4()}")

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["data"] == {"dependents": 3}

    def test_store_error_is_generic(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.units.unit_service.create",
            new_callable=AsyncMock,
            side_effect=StoreError("duplicate key value violates unique constraint"),
        ):
            response = client.post("/api/units", json={"name": "Ops"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server error"}

    def test_unexpected_error_does_not_leak(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.units.unit_service.list_all",
            new_callable=AsyncMock,
            side_effect=RuntimeError("password=hunter2"),
        ):
            response = client.get("/api/units")

        assert response.status_code == 500
        assert "hunter2" not in response.text
        assert response.json()["message"] == "Server error"

    def test_bad_body_is_400(self, client, as_identity):
        as_identity(ADMIN)
        response = client.post("/api/projects", json={"name": "Apollo", "cost": "lots"})
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid value for cost"}

    def test_service_validation_is_400(self, client, as_identity, db):
        as_identity(ADMIN)
        response = client.post("/api/units", json={"name": "   "})
        assert response.status_code == 400
        assert response.json()["message"] == "Unit name is required"
        db.commit.assert_not_awaited()

    def test_bad_path_id_is_400(self, client, as_identity):
        as_identity(ADMIN)
        response = client.get("/api/units/not-a-uuid")
        assert response.status_code == 400


# ── Logs ─────────────────────────────────────────────────────────────


class TestLogs:
    def test_paginated_listing(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.logs.ActivityLogStore.query",
            new_callable=AsyncMock,
            return_value=([_log(), _log()], 45),
        ) as query:
            response = client.get("/api/logs", params={"page": 2, "page_size": 20, "actor": "Ada"})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 2, "page_size": 20, "total": 45, "total_pages": 3}
        filters, page, size = query.call_args.args
        assert filters.actor == "Ada"
        assert (page, size) == (2, 20)

    def test_page_size_clamped(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.logs.ActivityLogStore.query",
            new_callable=AsyncMock,
            return_value=([], 0),
        ) as query:
            response = client.get("/api/logs", params={"page_size": 10_000})

        assert response.status_code == 200
        assert query.call_args.args[2] == 200
        assert response.json()["pagination"]["total_pages"] == 0

    def test_naive_dates_are_utc(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.logs.ActivityLogStore.query",
            new_callable=AsyncMock,
            return_value=([], 0),
        ) as query:
            client.get("/api/logs", params={"start": "2025-06-01T00:00:00"})

        filters = query.call_args.args[0]
        assert filters.start == datetime(2025, 6, 1, tzinfo=UTC)

    def test_missing_record(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.logs.ActivityLogStore.get", new_callable=AsyncMock, return_value=None
        ):
            response = client.get(f"/api/logs/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_purge(self, client, as_identity):
        as_identity(ADMIN)
        with patch(
            "projetrack.api.logs.purge_logs", new_callable=AsyncMock, return_value=7
        ) as purge:
            response = client.delete("/api/logs/purge", params={"days": 30})

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": 7}
        assert purge.call_args.args[1:] == (30, "Ada", "10.0.0.1")

    def test_purge_rejects_zero_days(self, client, as_identity):
        as_identity(ADMIN)
        with patch("projetrack.api.logs.purge_logs", new_callable=AsyncMock) as purge:
            response = client.delete("/api/logs/purge", params={"days": 0})
        assert response.status_code == 400
        purge.assert_not_awaited()

    def test_purge_defaults_to_retention_period(self, client, as_identity):
        as_identity(ADMIN)
        with (
            patch.object(settings, "log_retention_days", 45),
            patch("projetrack.api.logs.purge_logs", new_callable=AsyncMock, return_value=0) as purge,
        ):
            response = client.delete("/api/logs/purge")

        assert response.status_code == 200
        assert purge.call_args.args[1] == 45


# ── Reports ──────────────────────────────────────────────────────────


class TestReports:
    def test_summary(self, client, as_identity):
        as_identity(STAFF)
        summary = ProjectSummary(
            total=2,
            active=1,
            completed=1,
            cancelled=0,
            pending=0,
            total_cost=Decimal("300.00"),
            average_cost=Decimal("150.00"),
        )
        with patch(
            "projetrack.api.reports.queries.summary_report",
            new_callable=AsyncMock,
            return_value={"summary": summary, "status_counts": {2: 1, 3: 1}},
        ):
            response = client.get("/api/reports/summary")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["summary"]["total"] == 2
        assert data["status_counts"] == {"2": 1, "3": 1}

    def test_unknown_category(self, client, as_identity, db):
        as_identity(STAFF)
        response = client.get("/api/reports/general", params={"category": "colour", "value": "red"})
        assert response.status_code == 400
        db.execute.assert_not_awaited()

    def test_project_report(self, client, as_identity):
        as_identity(STAFF)
        project_id = uuid.uuid4()
        with patch(
            "projetrack.api.reports.queries.project_report",
            new_callable=AsyncMock,
            return_value={"project": {"id": str(project_id), "name": "Apollo"}, "projects": []},
        ) as report:
            response = client.get(f"/api/reports/project/{project_id}")

        assert response.status_code == 200
        assert response.json()["data"]["project"]["name"] == "Apollo"
        assert report.call_args.args[1] == project_id

    def test_project_report_bad_id(self, client, as_identity):
        as_identity(STAFF)
        with patch("projetrack.api.reports.queries.project_report", new_callable=AsyncMock) as report:
            response = client.get("/api/reports/project/not-a-uuid")
        assert response.status_code == 400
        report.assert_not_awaited()

    def test_project_report_missing(self, client, as_identity):
        as_identity(STAFF)
        with patch(
            "projetrack.api.reports.queries.project_report",
            new_callable=AsyncMock,
            side_effect=NotFoundError("Project not found"),
        ):
            response = client.get(f"/api/reports/project/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_user_report(self, client, as_identity):
        as_identity(STAFF)
        stats = UserStats(
            total=3,
            admins=1,
            moderators=0,
            users=2,
            roles=[
                RoleCount(role=1, label="Admin", count=1),
                RoleCount(role=3, label="User", count=2),
            ],
        )
        with patch(
            "projetrack.api.reports.queries.user_report", new_callable=AsyncMock, return_value=stats
        ):
            response = client.get("/api/reports/users")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 3
        assert [r["label"] for r in data["roles"]] == ["Admin", "User"]

    def test_user_statistics_admin_only(self, client, as_identity):
        stats = UserStats(total=0, admins=0, moderators=0, users=0, roles=[])
        with patch(
            "projetrack.api.users.queries.user_report", new_callable=AsyncMock, return_value=stats
        ) as report:
            as_identity(STAFF)
            assert client.get("/api/users/statistics").status_code == 403
            report.assert_not_awaited()

            as_identity(ADMIN)
            response = client.get("/api/users/statistics")

        assert response.status_code == 200
        assert response.json()["data"]["total"] == 0


# ── Login / health ───────────────────────────────────────────────────


class TestLogin:
    def test_login(self, client):
        user = SimpleNamespace(
            id=uuid.uuid4(),
            full_name="Ada",
            staff_id="S-1",
            role=1,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )
        result = SimpleNamespace(
            token="tok",
            claims=SimpleNamespace(expires_at=datetime(2025, 1, 2, tzinfo=UTC)),
            user=user,
        )
        with (
            patch.object(settings.security, "trust_proxy_headers", True),
            patch(
                "projetrack.api.auth.auth_service.login",
                new_callable=AsyncMock,
                return_value=result,
            ) as login,
        ):
            response = client.post(
                "/api/auth/login",
                json={"staff_id": "S-1", "password": "secret"},
                headers={"X-Forwarded-For": "203.0.113.5"},
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"] == "tok"
        assert data["token_type"] == "bearer"
        assert login.call_args.kwargs["ip"] == "203.0.113.5"


class TestHealth:
    def test_healthy(self, client):
        checks = {"postgresql": {"status": "ok"}, "redis": {"status": "ok"}}
        with patch(
            "projetrack.main.check_system_health", new_callable=AsyncMock, return_value=checks
        ):
            response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_degraded(self, client):
        checks = {"postgresql": {"status": "error"}, "redis": {"status": "ok"}}
        with patch(
            "projetrack.main.check_system_health", new_callable=AsyncMock, return_value=checks
        ):
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
