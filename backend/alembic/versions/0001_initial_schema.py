"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "timesheet_policy",
        sa.Column("tenant_id", sa.Uuid(), primary_key=True),
        sa.Column("week_start_day", sa.Integer(), server_default="1", nullable=False),
        sa.Column("min_hours_per_day", sa.Numeric(4, 2), nullable=True),
        sa.Column("max_hours_per_day", sa.Numeric(4, 2), nullable=True),
        sa.Column("min_hours_per_week", sa.Numeric(5, 2), nullable=True),
        sa.Column("max_hours_per_week", sa.Numeric(5, 2), nullable=True),
        sa.Column("allow_overtime", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("require_approval", sa.Boolean(), server_default=sa.true(), nullable=False),
        _timestamp("updated_at"),
        sa.CheckConstraint("week_start_day BETWEEN 0 AND 6", name="ck_policy_week_start_day"),
    )

    op.create_table(
        "profile",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("manager_user_id", sa.Uuid(), nullable=True),
        sa.Column("job_title", sa.String(length=255), nullable=True),
        sa.UniqueConstraint("tenant_id", "user_id", name="uq_profile_tenant_user"),
    )
    op.create_index("ix_profile_tenant_id", "profile", ["tenant_id"])
    op.create_index("ix_profile_user_id", "profile", ["user_id"])
    op.create_index("ix_profile_manager_user_id", "profile", ["manager_user_id"])

    op.create_table(
        "timesheet",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="draft", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_by", sa.Uuid(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Uuid(), nullable=True),
        sa.Column("review_note", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("tenant_id", "user_id", "week_start", name="uq_timesheet_user_week"),
    )
    op.create_index("ix_timesheet_tenant_id", "timesheet", ["tenant_id"])
    op.create_index("ix_timesheet_user_id", "timesheet", ["user_id"])
    op.create_index("ix_timesheet_status", "timesheet", ["status"])
    op.create_index("ix_timesheet_tenant_status", "timesheet", ["tenant_id", "status"])

    op.create_table(
        "time_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("task_id", sa.Uuid(), nullable=True),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("hours", sa.Numeric(4, 2), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        _timestamp("created_at"),
        sa.UniqueConstraint(
            "tenant_id",
            "user_id",
            "project_id",
            "task_id",
            "week_start",
            "day_of_week",
            name="uq_time_entry_slot",
        ),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_time_entry_day_of_week"),
        sa.CheckConstraint("hours >= 0", name="ck_time_entry_hours"),
    )
    op.create_index("ix_time_entry_tenant_id", "time_entry", ["tenant_id"])
    op.create_index("ix_time_entry_project_id", "time_entry", ["project_id"])
    op.create_index("ix_time_entry_user_week", "time_entry", ["tenant_id", "user_id", "week_start"])

    op.create_table(
        "benefit_type",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("unit", sa.String(length=10), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("allow_negative_balance", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("annual_amount", sa.Numeric(6, 2), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("tenant_id", "key", name="uq_benefit_type_tenant_key"),
        sa.CheckConstraint("unit IN ('days', 'hours')", name="ck_benefit_type_unit"),
    )
    op.create_index("ix_benefit_type_tenant_id", "benefit_type", ["tenant_id"])

    op.create_table(
        "benefit_balance",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "benefit_type_id",
            sa.Uuid(),
            sa.ForeignKey("benefit_type.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("current_balance", sa.Numeric(7, 2), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        _timestamp("updated_at"),
        sa.UniqueConstraint("tenant_id", "user_id", "benefit_type_id", name="uq_benefit_balance_user_type"),
    )
    op.create_index("ix_benefit_balance_tenant_id", "benefit_balance", ["tenant_id"])
    op.create_index("ix_benefit_balance_user_id", "benefit_balance", ["user_id"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "benefit_type_id",
            sa.Uuid(),
            sa.ForeignKey("benefit_type.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(6, 2), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("note", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("amount > 0", name="ck_leave_request_amount"),
    )
    op.create_index("ix_leave_request_tenant_id", "leave_request", ["tenant_id"])
    op.create_index("ix_leave_request_user_id", "leave_request", ["user_id"])
    op.create_index("ix_leave_request_benefit_type_id", "leave_request", ["benefit_type_id"])
    op.create_index(
        "ix_leave_request_team_view",
        "leave_request",
        ["tenant_id", "status", "start_date", "end_date", "user_id"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("actor_user_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_audit_log_tenant_id", "audit_log", ["tenant_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_request")
    op.drop_table("benefit_balance")
    op.drop_table("benefit_type")
    op.drop_table("time_entry")
    op.drop_table("timesheet")
    op.drop_table("profile")
    op.drop_table("timesheet_policy")
