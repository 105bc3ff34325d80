# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator


class UpsertTimesheetPolicyPayload(BaseModel):
    """Request body for creating or replacing a tenant's timesheet policy."""

    week_start_day: int = Field(default=1, ge=0, le=6, description="0=Sunday .. 6=Saturday")
    min_hours_per_day: Decimal | None = Field(default=None, ge=0, le=24)
    max_hours_per_day: Decimal | None = Field(default=None, ge=0, le=24)
    min_hours_per_week: Decimal | None = Field(default=None, ge=0, le=168)
    max_hours_per_week: Decimal | None = Field(default=None, ge=0, le=168)
    allow_overtime: bool = True
    require_approval: bool = True

    @model_validator(mode="after")
    def _validate_ranges(self) -> Self:
        pairs = [
            ("min_hours_per_day", self.min_hours_per_day, "max_hours_per_day", self.max_hours_per_day),
            ("min_hours_per_week", self.min_hours_per_week, "max_hours_per_week", self.max_hours_per_week),
        ]
        for low_name, low, high_name, high in pairs:
            if low is not None and high is not None and low > high:
                msg = f"{low_name} must not exceed {high_name}"
                raise ValueError(msg)
        return self


class TimesheetPolicyResponse(BaseModel):
    """Response schema for a tenant's timesheet policy."""

    tenant_id: uuid.UUID
    week_start_day: int
    min_hours_per_day: Decimal | None
    max_hours_per_day: Decimal | None
    min_hours_per_week: Decimal | None
    max_hours_per_week: Decimal | None
    allow_overtime: bool
    require_approval: bool
    updated_at: datetime
