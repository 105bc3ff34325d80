# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from workforce.models.enums import AuditAction, AuditEntity, TimesheetStatus
from workforce.models.timesheet import TimeEntry
from workforce.schemas.time_entry import (
    BulkTimeEntriesResponse,
    BulkTimeEntriesSummary,
    CopyWeekResponse,
    DailyTotal,
    EntryIssue,
    ProjectHours,
    TimeEntryListResponse,
    WeekEntryResponse,
    WeekViewResponse,
)
from workforce.services.audit import model_to_audit_dict, write_audit_log
from workforce.services.manager_scope import authorize_user_access
from workforce.services.policy import resolve_week_start_day
from workforce.services.timesheet import (
    build_time_entry_response,
    build_timesheet_response,
    find_timesheet_for_week,
    get_timesheet_or_404,
    list_week_entries,
)
from workforce.services.weeks import date_for_day, normalize_week_start

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.models.timesheet import Timesheet
    from workforce.schemas.auth import AuthContext
    from workforce.schemas.time_entry import BulkTimeEntriesPayload, CopyWeekPayload, TimeEntryFilters
    from workforce.schemas.timesheet import TimeEntryResponse, UpsertTimeEntryPayload

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")

# (project_id, task_id, day_of_week)
Slot = tuple[uuid.UUID, uuid.UUID | None, int]
# (entry, state before the write or None for inserts, state after)
EntryWrite = tuple[TimeEntry, dict[str, object] | None, dict[str, object]]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_editable(timesheet: Timesheet, auth: AuthContext) -> None:
    """Entries may only change on the owner's own draft timesheet."""
    if timesheet.user_id != auth.user_id:
        raise ForbiddenError("You can only modify time entries on your own timesheets")
    if timesheet.status != TimesheetStatus.DRAFT.value:
        raise InvalidStateError(f"Cannot modify time entries. Timesheet status is {timesheet.status}")


async def _find_slot(session: AsyncSession, timesheet: Timesheet, slot: Slot) -> TimeEntry | None:
    """Return the entry occupying ``slot`` in the timesheet's week, if any."""
    project_id, task_id, day_of_week = slot
    task_filter = col(TimeEntry.task_id).is_(None) if task_id is None else col(TimeEntry.task_id) == task_id
    result = await session.execute(
        select(TimeEntry).where(
            col(TimeEntry.tenant_id) == timesheet.tenant_id,
            col(TimeEntry.user_id) == timesheet.user_id,
            col(TimeEntry.week_start) == timesheet.week_start,
            col(TimeEntry.project_id) == project_id,
            col(TimeEntry.day_of_week) == day_of_week,
            task_filter,
        )
    )
    return result.scalar_one_or_none()


def _new_entry(timesheet: Timesheet, slot: Slot, hours: Decimal, note: str | None) -> TimeEntry:
    project_id, task_id, day_of_week = slot
    return TimeEntry(
        tenant_id=timesheet.tenant_id,
        user_id=timesheet.user_id,
        project_id=project_id,
        task_id=task_id,
        week_start=timesheet.week_start,
        day_of_week=day_of_week,
        hours=hours,
        note=note,
    )


async def _audit_entry_writes(
    session: AsyncSession,
    auth: AuthContext,
    writes: list[EntryWrite],
) -> None:
    """Record one audit event per written entry."""
    for entry, before_dict, after_dict in writes:
        await write_audit_log(
            session,
            tenant_id=auth.tenant_id,
            actor_user_id=auth.user_id,
            entity=AuditEntity.TIME_ENTRY,
            action=AuditAction.UPDATE if before_dict else AuditAction.CREATE,
            entity_id=entry.id,
            before_json=before_dict,
            after_json=after_dict,
        )


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(_TWO_PLACES)


# ---------------------------------------------------------------------------
# Single-entry writes
# ---------------------------------------------------------------------------


async def upsert_time_entry(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    payload: UpsertTimeEntryPayload,
) -> TimeEntryResponse:
    """Log hours for a (project, task, day) slot, replacing any existing entry.

    Hours are not checked against the tenant policy here; the validator
    reports limits separately.
    """
    slot: Slot = (payload.project_id, payload.task_id, payload.day_of_week)
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        _require_editable(timesheet, auth)

        entry = await _find_slot(session, timesheet, slot)
        before_dict = model_to_audit_dict(entry) if entry is not None else None
        if entry is None:
            entry = _new_entry(timesheet, slot, payload.hours, payload.note)
            session.add(entry)
        else:
            entry.hours = payload.hours
            entry.note = payload.note
        await session.flush()
        after_dict = model_to_audit_dict(entry)

    response = build_time_entry_response(entry)
    logger.debug("Time entry %s on timesheet %s set to %s hours", entry.id, timesheet_id, entry.hours)
    await _audit_entry_writes(session, auth, [(entry, before_dict, after_dict)])
    return response


async def delete_time_entry(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    entry_id: uuid.UUID,
) -> None:
    """Remove one entry from the owner's draft timesheet."""
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        _require_editable(timesheet, auth)

        result = await session.execute(
            select(TimeEntry).where(
                col(TimeEntry.id) == entry_id,
                col(TimeEntry.tenant_id) == timesheet.tenant_id,
                col(TimeEntry.user_id) == timesheet.user_id,
                col(TimeEntry.week_start) == timesheet.week_start,
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError(f"Time entry with ID {entry_id} not found")
        before_dict = model_to_audit_dict(entry)
        await session.delete(entry)

    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.TIME_ENTRY,
        action=AuditAction.DELETE,
        entity_id=entry_id,
        before_json=before_dict,
    )


# ---------------------------------------------------------------------------
# Batch writes
# ---------------------------------------------------------------------------


async def bulk_upsert_time_entries(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    payload: BulkTimeEntriesPayload,
) -> BulkTimeEntriesResponse:
    """Upsert a batch of entries on the owner's draft timesheet.

    Every entry is written in one transaction. A slot repeated within the
    batch is reported in ``errors`` and only its first occurrence is
    written.
    """
    created: list[TimeEntry] = []
    updated: list[TimeEntry] = []
    errors: list[EntryIssue] = []

    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        _require_editable(timesheet, auth)

        seen: set[Slot] = set()
        pending: list[tuple[TimeEntry, dict[str, object] | None]] = []
        for item in payload.entries:
            slot: Slot = (item.project_id, item.task_id, item.day_of_week)
            if slot in seen:
                errors.append(
                    EntryIssue(
                        project_id=item.project_id,
                        task_id=item.task_id,
                        day_of_week=item.day_of_week,
                        reason="Duplicate entry for this project, task and day in the request",
                    )
                )
                continue
            seen.add(slot)

            entry = await _find_slot(session, timesheet, slot)
            if entry is None:
                entry = _new_entry(timesheet, slot, item.hours, item.note)
                session.add(entry)
                created.append(entry)
                pending.append((entry, None))
            else:
                pending.append((entry, model_to_audit_dict(entry)))
                entry.hours = item.hours
                entry.note = item.note
                updated.append(entry)

        await session.flush()
        writes: list[EntryWrite] = [(entry, before, model_to_audit_dict(entry)) for entry, before in pending]

    response = BulkTimeEntriesResponse(
        created=[build_time_entry_response(e) for e in created],
        updated=[build_time_entry_response(e) for e in updated],
        errors=errors,
        summary=BulkTimeEntriesSummary(
            created_count=len(created),
            updated_count=len(updated),
            error_count=len(errors),
            total_requested=len(payload.entries),
        ),
    )
    logger.info(
        "Bulk upsert on timesheet %s: %d created, %d updated, %d rejected",
        timesheet_id,
        len(created),
        len(updated),
        len(errors),
    )
    await _audit_entry_writes(session, auth, writes)
    return response


async def copy_week(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    payload: CopyWeekPayload,
) -> CopyWeekResponse:
    """Copy the owner's entries from another week onto this draft timesheet.

    The source week is normalized to the tenant's week-start day and needs
    no timesheet of its own. An occupied target slot is skipped, or
    overwritten when ``overwrite_existing`` is set.
    """
    week_start_day = await resolve_week_start_day(session, auth.tenant_id)
    source_week = normalize_week_start(payload.from_week_start, week_start_day)

    copied: list[TimeEntry] = []
    skipped: list[EntryIssue] = []
    overwritten = 0
    pending: list[tuple[TimeEntry, dict[str, object] | None]] = []

    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        _require_editable(timesheet, auth)
        if source_week == timesheet.week_start:
            raise ValidationError("Cannot copy a week onto itself")

        sources = await list_week_entries(session, timesheet.tenant_id, timesheet.user_id, source_week)
        for source in sources:
            slot: Slot = (source.project_id, source.task_id, source.day_of_week)
            note = source.note if payload.copy_notes else None
            existing = await _find_slot(session, timesheet, slot)
            if existing is not None and not payload.overwrite_existing:
                skipped.append(
                    EntryIssue(
                        project_id=source.project_id,
                        task_id=source.task_id,
                        day_of_week=source.day_of_week,
                        reason="Entry already exists",
                    )
                )
                continue
            if existing is not None:
                pending.append((existing, model_to_audit_dict(existing)))
                existing.hours = source.hours
                existing.note = note
                copied.append(existing)
                overwritten += 1
            else:
                entry = _new_entry(timesheet, slot, source.hours, note)
                session.add(entry)
                pending.append((entry, None))
                copied.append(entry)

        await session.flush()
        writes: list[EntryWrite] = [(entry, before, model_to_audit_dict(entry)) for entry, before in pending]

    response = CopyWeekResponse(
        copied_count=len(copied) - overwritten,
        overwritten_count=overwritten,
        skipped_count=len(skipped),
        entries=[build_time_entry_response(e) for e in copied],
        skipped=skipped,
    )
    logger.info(
        "Copied week %s onto timesheet %s: %d new, %d overwritten, %d skipped",
        source_week,
        timesheet_id,
        response.copied_count,
        overwritten,
        len(skipped),
    )
    await _audit_entry_writes(session, auth, writes)
    return response


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_time_entry(
    session: AsyncSession,
    auth: AuthContext,
    entry_id: uuid.UUID,
) -> TimeEntryResponse:
    """Get one time entry. Readable by its owner, admins and the owner's manager."""
    result = await session.execute(
        select(TimeEntry).where(
            col(TimeEntry.id) == entry_id,
            col(TimeEntry.tenant_id) == auth.tenant_id,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFoundError(f"Time entry with ID {entry_id} not found")
    await authorize_user_access(session, auth, entry.user_id)
    return build_time_entry_response(entry)


async def list_time_entries(
    session: AsyncSession,
    auth: AuthContext,
    filters: TimeEntryFilters,
) -> TimeEntryListResponse:
    """List one user's entries, newest week first.

    ``user_id`` defaults to the caller; listing someone else's entries
    follows the same access rule as reading their timesheet.
    """
    user_id = filters.user_id or auth.user_id
    await authorize_user_access(session, auth, user_id)

    base_filters = [
        col(TimeEntry.tenant_id) == auth.tenant_id,
        col(TimeEntry.user_id) == user_id,
    ]
    if filters.project_id is not None:
        base_filters.append(col(TimeEntry.project_id) == filters.project_id)
    if filters.task_id is not None:
        base_filters.append(col(TimeEntry.task_id) == filters.task_id)
    if filters.week_start is not None:
        base_filters.append(col(TimeEntry.week_start) == filters.week_start)
    if filters.date_from is not None:
        base_filters.append(col(TimeEntry.week_start) >= filters.date_from)
    if filters.date_to is not None:
        base_filters.append(col(TimeEntry.week_start) <= filters.date_to)
    if filters.day_of_week is not None:
        base_filters.append(col(TimeEntry.day_of_week) == filters.day_of_week)

    count_result = await session.execute(select(func.count()).select_from(TimeEntry).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(TimeEntry)
        .where(*base_filters)
        .order_by(
            col(TimeEntry.week_start).desc(),
            col(TimeEntry.day_of_week),
            col(TimeEntry.created_at),
            col(TimeEntry.id),
        )
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )
    return TimeEntryListResponse(
        items=[build_time_entry_response(e) for e in result.scalars().all()],
        total=total,
        page=filters.page,
        page_size=filters.page_size,
    )


async def get_week_view(
    session: AsyncSession,
    auth: AuthContext,
    week_of: date,
    user_id: uuid.UUID | None = None,
) -> WeekViewResponse:
    """Summarize one user's week: entries with dates, daily and weekly
    totals, and hours per project.

    ``week_of`` may be any day of the week. The week's timesheet is included
    when one exists; the view never creates it.
    """
    target_user = user_id or auth.user_id
    await authorize_user_access(session, auth, target_user)

    week_start_day = await resolve_week_start_day(session, auth.tenant_id)
    week_start = normalize_week_start(week_of, week_start_day)
    timesheet = await find_timesheet_for_week(session, auth.tenant_id, target_user, week_start)
    entries = await list_week_entries(session, auth.tenant_id, target_user, week_start)

    per_day: dict[int, Decimal] = defaultdict(Decimal)
    per_project: dict[uuid.UUID, Decimal] = defaultdict(Decimal)
    for entry in entries:
        per_day[entry.day_of_week] += entry.hours
        per_project[entry.project_id] += entry.hours
    weekly_total = sum(per_day.values(), Decimal(0))

    breakdown = [
        ProjectHours(
            project_id=project_id,
            total_hours=_quantize(hours),
            percentage=_quantize(hours * 100 / weekly_total) if weekly_total else Decimal("0.00"),
        )
        for project_id, hours in sorted(per_project.items(), key=lambda item: (-item[1], str(item[0])))
    ]

    return WeekViewResponse(
        user_id=target_user,
        week_start=week_start,
        week_end=week_start + timedelta(days=6),
        timesheet=build_timesheet_response(timesheet) if timesheet is not None else None,
        entries=[
            WeekEntryResponse(
                **build_time_entry_response(entry).model_dump(),
                date=date_for_day(week_start, entry.day_of_week),
            )
            for entry in entries
        ],
        daily_totals=[
            DailyTotal(day_of_week=day, date=date_for_day(week_start, day), hours=_quantize(per_day[day]))
            for day in range(7)
        ],
        weekly_total=_quantize(weekly_total),
        entry_count=len(entries),
        project_breakdown=breakdown,
    )
