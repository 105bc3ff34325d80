# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from workforce.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from workforce.models.enums import TimesheetStatus


class Timesheet(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """One user's weekly time report with its approval workflow state."""

    __tablename__ = "timesheet"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "user_id", "week_start", name="uq_timesheet_user_week"),
        sa.Index("ix_timesheet_tenant_status", "tenant_id", "status"),
    )

    tenant_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    week_start: date
    status: str = Field(
        default=TimesheetStatus.DRAFT, max_length=20, index=True, sa_column_kwargs={"server_default": "draft"}
    )
    submitted_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    submitted_by: uuid.UUID | None = None
    reviewed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    reviewed_by: uuid.UUID | None = None
    review_note: str | None = None


class TimeEntry(UUIDBase, TimestampMixin, table=True):
    """A single day's logged hours for one project within a timesheet week."""

    __tablename__ = "time_entry"
    __table_args__ = (
        sa.UniqueConstraint(
            "tenant_id",
            "user_id",
            "project_id",
            "task_id",
            "week_start",
            "day_of_week",
            name="uq_time_entry_slot",
        ),
        sa.Index("ix_time_entry_user_week", "tenant_id", "user_id", "week_start"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_time_entry_day_of_week"),
        sa.CheckConstraint("hours >= 0", name="ck_time_entry_hours"),
    )

    tenant_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID
    project_id: uuid.UUID = Field(index=True)
    task_id: uuid.UUID | None = None
    week_start: date
    day_of_week: int
    hours: Decimal = Field(max_digits=4, decimal_places=2)
    note: str | None = None
