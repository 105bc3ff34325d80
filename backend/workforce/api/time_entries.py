# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from workforce.api.deps import AuthDep, resolve_page_size, validate_tenant_scope
from workforce.db import SessionDep
from workforce.schemas.time_entry import TimeEntryFilters, TimeEntryListResponse, WeekViewResponse
from workforce.schemas.timesheet import TimeEntryResponse
from workforce.services import time_entry as time_entry_service

time_entries_router = APIRouter(
    prefix="/tenants/{tenant_id}/time-entries",
    tags=["time-entries"],
    dependencies=[Depends(validate_tenant_scope)],
)


@time_entries_router.get("", response_model=TimeEntryListResponse)
async def list_time_entries(
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
    project_id: uuid.UUID | None = Query(default=None),
    task_id: uuid.UUID | None = Query(default=None),
    week_start: date | None = Query(default=None),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    day_of_week: int | None = Query(default=None, ge=0, le=6),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
) -> TimeEntryListResponse:
    """List a user's time entries; defaults to the caller's own."""
    filters = TimeEntryFilters(
        user_id=user_id,
        project_id=project_id,
        task_id=task_id,
        week_start=week_start,
        date_from=date_from,
        date_to=date_to,
        day_of_week=day_of_week,
        page=page,
        page_size=resolve_page_size(page_size),
    )
    return await time_entry_service.list_time_entries(session, auth, filters)


@time_entries_router.get("/week", response_model=WeekViewResponse)
async def get_week_view(
    session: SessionDep,
    auth: AuthDep,
    week_of: date = Query(),
    user_id: uuid.UUID | None = Query(default=None),
) -> WeekViewResponse:
    """Entries, daily and weekly totals, and hours per project for one week."""
    return await time_entry_service.get_week_view(session, auth, week_of, user_id)


@time_entries_router.get("/{entry_id}", response_model=TimeEntryResponse)
async def get_time_entry(
    entry_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TimeEntryResponse:
    """Get a single time entry."""
    return await time_entry_service.get_time_entry(session, auth, entry_id)
