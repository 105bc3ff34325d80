# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from workforce.api.deps import AuthDep, ReviewerDep, resolve_page_size, validate_tenant_scope
from workforce.db import SessionDep
from workforce.models.enums import TimesheetStatus
from workforce.schemas.timesheet import (
    CreateTimesheetPayload,
    CurrentTimesheetResponse,
    RecallResponse,
    ReviewPayload,
    TimeEntryResponse,
    TimesheetDetailResponse,
    TimesheetFilters,
    TimesheetListResponse,
    TimesheetResponse,
    UpsertTimeEntryPayload,
)
from workforce.schemas.time_entry import (
    BulkTimeEntriesPayload,
    BulkTimeEntriesResponse,
    CopyWeekPayload,
    CopyWeekResponse,
)
from workforce.schemas.validation import ValidationReport
from workforce.services import time_entry as time_entry_service
from workforce.services import timesheet as timesheet_service
from workforce.services import timesheet_validation as validation_service

timesheets_router = APIRouter(
    prefix="/tenants/{tenant_id}/timesheets",
    tags=["timesheets"],
    dependencies=[Depends(validate_tenant_scope)],
)


@timesheets_router.get("", response_model=TimesheetListResponse)
async def list_timesheets(
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
    week_start: date | None = Query(default=None),
    status_filter: TimesheetStatus | None = Query(default=None, alias="status"),
    team: bool = Query(default=False),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
) -> TimesheetListResponse:
    """List timesheets; ``team=true`` restricts to the caller's direct reports."""
    filters = TimesheetFilters(
        user_id=user_id,
        week_start=week_start,
        status=status_filter,
        team=team,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=resolve_page_size(page_size),
    )
    return await timesheet_service.list_timesheets(session, auth, filters)


@timesheets_router.post("", response_model=TimesheetResponse, status_code=status.HTTP_201_CREATED)
async def create_timesheet(
    payload: CreateTimesheetPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TimesheetResponse:
    """Create a draft timesheet for a week."""
    return await timesheet_service.create_timesheet(session, auth, payload)


@timesheets_router.get("/me/current", response_model=CurrentTimesheetResponse)
async def get_my_current_timesheet(
    session: SessionDep,
    auth: AuthDep,
    week_start_day: int | None = Query(default=None, ge=0, le=6),
) -> CurrentTimesheetResponse:
    """Get the caller's timesheet for this week, creating it when missing."""
    return await timesheet_service.get_my_current_timesheet(session, auth, week_start_day)


@timesheets_router.get("/{timesheet_id}", response_model=TimesheetDetailResponse)
async def get_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TimesheetDetailResponse:
    """Get a timesheet with its time entries."""
    return await timesheet_service.get_timesheet(session, auth, timesheet_id)


@timesheets_router.get("/{timesheet_id}/validation", response_model=ValidationReport)
async def validate_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ValidationReport:
    """Check a timesheet against the tenant policy without changing it."""
    return await validation_service.validate_timesheet(session, auth.tenant_id, timesheet_id, auth=auth)


@timesheets_router.post("/{timesheet_id}/submit", response_model=TimesheetResponse)
async def submit_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TimesheetResponse:
    """Submit the caller's draft timesheet for review."""
    return await timesheet_service.submit_timesheet(session, auth, timesheet_id)


@timesheets_router.post("/{timesheet_id}/approve", response_model=TimesheetResponse)
async def approve_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    payload: ReviewPayload | None = None,
) -> TimesheetResponse:
    """Approve a submitted timesheet (manager or admin)."""
    return await timesheet_service.approve_timesheet(session, auth, timesheet_id, payload)


@timesheets_router.post("/{timesheet_id}/reject", response_model=TimesheetResponse)
async def reject_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    payload: ReviewPayload | None = None,
) -> TimesheetResponse:
    """Reject a submitted timesheet with a review note (manager or admin)."""
    return await timesheet_service.reject_timesheet(session, auth, timesheet_id, payload)


@timesheets_router.post("/{timesheet_id}/recall", response_model=RecallResponse)
async def recall_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RecallResponse:
    """Pull a submitted, unreviewed timesheet back to draft."""
    return await timesheet_service.recall_timesheet(session, auth, timesheet_id)


@timesheets_router.delete("/{timesheet_id}", status_code=204)
async def delete_timesheet(
    timesheet_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> None:
    """Delete the caller's draft timesheet and its entries."""
    await timesheet_service.delete_timesheet(session, auth, timesheet_id)


@timesheets_router.put("/{timesheet_id}/entries", response_model=TimeEntryResponse)
async def upsert_time_entry(
    timesheet_id: uuid.UUID,
    payload: UpsertTimeEntryPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TimeEntryResponse:
    """Log hours for one project/task/day on a draft timesheet."""
    return await time_entry_service.upsert_time_entry(session, auth, timesheet_id, payload)


@timesheets_router.delete("/{timesheet_id}/entries/{entry_id}", status_code=204)
async def delete_time_entry(
    timesheet_id: uuid.UUID,
    entry_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> None:
    """Remove a time entry from a draft timesheet."""
    await time_entry_service.delete_time_entry(session, auth, timesheet_id, entry_id)


@timesheets_router.put("/{timesheet_id}/entries/bulk", response_model=BulkTimeEntriesResponse)
async def bulk_upsert_time_entries(
    timesheet_id: uuid.UUID,
    payload: BulkTimeEntriesPayload,
    session: SessionDep,
    auth: AuthDep,
) -> BulkTimeEntriesResponse:
    """Log a batch of entries on a draft timesheet in one transaction."""
    return await time_entry_service.bulk_upsert_time_entries(session, auth, timesheet_id, payload)


@timesheets_router.post("/{timesheet_id}/copy-week", response_model=CopyWeekResponse)
async def copy_week(
    timesheet_id: uuid.UUID,
    payload: CopyWeekPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CopyWeekResponse:
    """Copy another week's entries onto a draft timesheet."""
    return await time_entry_service.copy_week(session, auth, timesheet_id, payload)
