# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from workforce.models.base import UpdatedAtMixin


class TimesheetPolicy(UpdatedAtMixin, table=True):
    """Per-tenant limits that timesheets are validated against."""

    __tablename__ = "timesheet_policy"
    __table_args__ = (sa.CheckConstraint("week_start_day BETWEEN 0 AND 6", name="ck_policy_week_start_day"),)

    tenant_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    week_start_day: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
    min_hours_per_day: Decimal | None = Field(default=None, max_digits=4, decimal_places=2)
    max_hours_per_day: Decimal | None = Field(default=None, max_digits=4, decimal_places=2)
    min_hours_per_week: Decimal | None = Field(default=None, max_digits=5, decimal_places=2)
    max_hours_per_week: Decimal | None = Field(default=None, max_digits=5, decimal_places=2)
    allow_overtime: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    require_approval: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
