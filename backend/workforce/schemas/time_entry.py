# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from workforce.schemas.timesheet import TimeEntryResponse, TimesheetResponse, UpsertTimeEntryPayload

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class BulkTimeEntriesPayload(BaseModel):
    """Request body for logging a batch of entries on one draft timesheet."""

    entries: list[UpsertTimeEntryPayload] = Field(min_length=1, max_length=200)


class CopyWeekPayload(BaseModel):
    """Request body for copying another week's entries onto a draft timesheet.

    ``from_week_start`` may be any day of the source week. Existing target
    entries are skipped unless ``overwrite_existing`` is set. Notes are
    dropped unless ``copy_notes`` is set.
    """

    from_week_start: datetime.date
    overwrite_existing: bool = False
    copy_notes: bool = False


class TimeEntryFilters(BaseModel):
    """Filters accepted by the time entry listing.

    ``week_start`` matches one week exactly; ``date_from``/``date_to``
    bound the entry's week start inclusively.
    """

    user_id: uuid.UUID | None = None
    project_id: uuid.UUID | None = None
    task_id: uuid.UUID | None = None
    week_start: datetime.date | None = None
    date_from: datetime.date | None = None
    date_to: datetime.date | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TimeEntryListResponse(BaseModel):
    """Paginated list of time entries."""

    items: list[TimeEntryResponse]
    total: int
    page: int
    page_size: int


class EntryIssue(BaseModel):
    """An entry a batch operation did not write, and why."""

    project_id: uuid.UUID
    task_id: uuid.UUID | None
    day_of_week: int
    reason: str


class BulkTimeEntriesSummary(BaseModel):
    created_count: int
    updated_count: int
    error_count: int
    total_requested: int


class BulkTimeEntriesResponse(BaseModel):
    """Outcome of a bulk upsert, split by what happened to each entry."""

    created: list[TimeEntryResponse]
    updated: list[TimeEntryResponse]
    errors: list[EntryIssue]
    summary: BulkTimeEntriesSummary


class CopyWeekResponse(BaseModel):
    """Outcome of copying a week's entries."""

    copied_count: int
    overwritten_count: int
    skipped_count: int
    entries: list[TimeEntryResponse]
    skipped: list[EntryIssue]


class WeekEntryResponse(TimeEntryResponse):
    """A time entry with its calendar date resolved."""

    date: datetime.date


class DailyTotal(BaseModel):
    day_of_week: int
    date: datetime.date
    hours: Decimal


class ProjectHours(BaseModel):
    """Hours logged against one project and their share of the week."""

    project_id: uuid.UUID
    total_hours: Decimal
    percentage: Decimal


class WeekViewResponse(BaseModel):
    """One user's week: entries, daily and weekly totals, and project split."""

    user_id: uuid.UUID
    week_start: datetime.date
    week_end: datetime.date
    timesheet: TimesheetResponse | None
    entries: list[WeekEntryResponse]
    daily_totals: list[DailyTotal]
    weekly_total: Decimal
    entry_count: int
    project_breakdown: list[ProjectHours]
