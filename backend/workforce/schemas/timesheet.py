# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from workforce.models.enums import TimesheetStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateTimesheetPayload(BaseModel):
    """Request body for creating a draft timesheet.

    ``user_id`` defaults to the caller. ``week_start`` may be any day of the
    target week; it is normalized to the tenant's week-start day.
    """

    user_id: uuid.UUID | None = None
    week_start: date


class ReviewPayload(BaseModel):
    """Request body for approve/reject actions."""

    note: str | None = Field(default=None, max_length=1000)


class TimesheetFilters(BaseModel):
    """Filters accepted by the timesheet listing."""

    user_id: uuid.UUID | None = None
    week_start: date | None = None
    status: TimesheetStatus | None = None
    team: bool = False
    date_from: date | None = None
    date_to: date | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)


class UpsertTimeEntryPayload(BaseModel):
    """Request body for logging hours on one day of a draft timesheet."""

    project_id: uuid.UUID
    task_id: uuid.UUID | None = None
    day_of_week: int = Field(ge=0, le=6)
    hours: Decimal = Field(ge=0, max_digits=4, decimal_places=2)
    note: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TimeEntryResponse(BaseModel):
    """A single time entry."""

    id: uuid.UUID
    project_id: uuid.UUID
    task_id: uuid.UUID | None
    week_start: date
    day_of_week: int
    hours: Decimal
    note: str | None
    created_at: datetime


class TimesheetResponse(BaseModel):
    """Response schema for a single timesheet."""

    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    week_start: date
    status: TimesheetStatus
    submitted_at: datetime | None
    submitted_by: uuid.UUID | None
    reviewed_at: datetime | None
    reviewed_by: uuid.UUID | None
    review_note: str | None
    created_at: datetime
    updated_at: datetime


class TimesheetSummaryResponse(TimesheetResponse):
    """Timesheet list item annotated with its logged hours."""

    total_hours: Decimal


class TimesheetDetailResponse(TimesheetResponse):
    """Timesheet with its time entries."""

    time_entries: list[TimeEntryResponse]


class TimesheetListResponse(BaseModel):
    """Paginated list of timesheets."""

    items: list[TimesheetSummaryResponse]
    total: int
    page: int
    page_size: int


class CurrentTimesheetResponse(BaseModel):
    """The caller's timesheet for the current week."""

    timesheet: TimesheetResponse
    auto_created: bool


class RecallResponse(BaseModel):
    """Outcome of recalling a submitted timesheet back to draft."""

    id: uuid.UUID
    status: TimesheetStatus
    previous_status: TimesheetStatus
    recalled_at: datetime
    recalled_by: uuid.UUID
