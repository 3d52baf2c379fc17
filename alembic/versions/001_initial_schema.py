"""Initial schema: units, sponsors, users, projects, stages, progress, activity log.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "activity_log",
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("actor", sa.String(100), nullable=False, comment="User display name or 'System'"),
        sa.Column("ip_address", sa.String(50)),
        sa.Column("user_agent", sa.String(200)),
        sa.Column("extra", sa.String(200), comment="Free-form supplementary text"),
        _id(),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_log_category", "activity_log", ["category"])
    op.create_index("ix_activity_log_actor", "activity_log", ["actor"])
    op.create_index("ix_activity_log_created_at", "activity_log", ["created_at"])

    op.create_table(
        "units",
        sa.Column("name", sa.String(200), nullable=False),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_units_created_at", "units", ["created_at"])

    op.create_table(
        "sponsors",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("unit_name", sa.String(200)),
        sa.Column("contact_info", sa.String(500)),
        sa.Column("description", sa.String(1000)),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_sponsors_created_at", "sponsors", ["created_at"])

    op.create_table(
        "users",
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("staff_id", sa.String(50), nullable=False, comment="Login identifier"),
        sa.Column("password_hash", sa.String(100), nullable=False, comment="bcrypt"),
        sa.Column("role", sa.Integer(), nullable=False),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_staff_id", "users", ["staff_id"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"])

    # ── Projects and their children ────────────────────────────────────

    op.create_table(
        "projects",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("department", sa.String(200), nullable=False),
        sa.Column("directorate", sa.String(200)),
        sa.Column("unit_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("units.id")),
        sa.Column("purpose", sa.Text()),
        sa.Column("scope", sa.Text()),
        sa.Column("team", sa.Text()),
        sa.Column("success_criteria", sa.Text()),
        sa.Column("sponsor", sa.String(500), comment="Free text, not a key"),
        sa.Column("cost", sa.Numeric(18, 2)),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("staff_count", sa.Integer(), nullable=False),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_unit_id", "projects", ["unit_id"])
    op.create_index("ix_projects_start_date", "projects", ["start_date"])
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "gantt_stages",
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_gantt_stages_project_id", "gantt_stages", ["project_id"])
    op.create_index("ix_gantt_stages_created_at", "gantt_stages", ["created_at"])

    op.create_table(
        "progress_entries",
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stage_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("gantt_stages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("percent_complete", sa.Integer(), nullable=False),
        sa.Column("entry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        _id(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_progress_entries_project_id", "progress_entries", ["project_id"])
    op.create_index("ix_progress_entries_stage_id", "progress_entries", ["stage_id"])
    op.create_index("ix_progress_entries_created_at", "progress_entries", ["created_at"])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("progress_entries")
    op.drop_table("gantt_stages")
    op.drop_table("projects")
    op.drop_table("users")
    op.drop_table("sponsors")
    op.drop_table("units")
    op.drop_table("activity_log")
