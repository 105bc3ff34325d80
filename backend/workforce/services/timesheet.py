# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from workforce.models.enums import AuditAction, AuditEntity, TimesheetStatus
from workforce.models.timesheet import TimeEntry, Timesheet
from workforce.schemas.timesheet import (
    CurrentTimesheetResponse,
    RecallResponse,
    TimeEntryResponse,
    TimesheetDetailResponse,
    TimesheetListResponse,
    TimesheetResponse,
    TimesheetSummaryResponse,
)
from workforce.services.audit import model_to_audit_dict, write_audit_log
from workforce.services.manager_scope import authorize_user_access, direct_reports
from workforce.services.policy import resolve_week_start_day
from workforce.services.weeks import current_week_start, normalize_week_start

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.schemas.auth import AuthContext
    from workforce.schemas.timesheet import CreateTimesheetPayload, ReviewPayload, TimesheetFilters

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_timesheet_response(timesheet: Timesheet) -> TimesheetResponse:
    """Map a timesheet model to its response schema."""
    return TimesheetResponse(
        id=timesheet.id,
        tenant_id=timesheet.tenant_id,
        user_id=timesheet.user_id,
        week_start=timesheet.week_start,
        status=TimesheetStatus(timesheet.status),
        submitted_at=timesheet.submitted_at,
        submitted_by=timesheet.submitted_by,
        reviewed_at=timesheet.reviewed_at,
        reviewed_by=timesheet.reviewed_by,
        review_note=timesheet.review_note,
        created_at=timesheet.created_at,
        updated_at=timesheet.updated_at,
    )


def build_time_entry_response(entry: TimeEntry) -> TimeEntryResponse:
    """Map a time entry model to its response schema."""
    return TimeEntryResponse(
        id=entry.id,
        project_id=entry.project_id,
        task_id=entry.task_id,
        week_start=entry.week_start,
        day_of_week=entry.day_of_week,
        hours=entry.hours,
        note=entry.note,
        created_at=entry.created_at,
    )


async def get_timesheet_or_404(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    timesheet_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Timesheet:
    """Fetch a timesheet by ID scoped to tenant. Raises 404 if not found."""
    query = select(Timesheet).where(
        col(Timesheet.id) == timesheet_id,
        col(Timesheet.tenant_id) == tenant_id,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    timesheet = result.scalar_one_or_none()
    if timesheet is None:
        raise NotFoundError(f"Timesheet with ID {timesheet_id} not found")
    return timesheet


async def find_timesheet_for_week(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    week_start: date,
) -> Timesheet | None:
    """Return the user's timesheet for ``week_start``, if one exists."""
    result = await session.execute(
        select(Timesheet).where(
            col(Timesheet.tenant_id) == tenant_id,
            col(Timesheet.user_id) == user_id,
            col(Timesheet.week_start) == week_start,
        )
    )
    return result.scalar_one_or_none()


async def list_time_entries(session: AsyncSession, timesheet: Timesheet) -> list[TimeEntry]:
    """Return a timesheet's entries ordered by day, then creation."""
    return await list_week_entries(session, timesheet.tenant_id, timesheet.user_id, timesheet.week_start)


async def list_week_entries(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    week_start: date,
) -> list[TimeEntry]:
    """Return a user's entries for one week, whether or not a timesheet exists."""
    result = await session.execute(
        select(TimeEntry)
        .where(
            col(TimeEntry.tenant_id) == tenant_id,
            col(TimeEntry.user_id) == user_id,
            col(TimeEntry.week_start) == week_start,
        )
        .order_by(
            col(TimeEntry.day_of_week),
            col(TimeEntry.created_at),
            col(TimeEntry.id),
        )
    )
    return list(result.scalars().all())


def _require_owner(timesheet: Timesheet, auth: AuthContext, action: str) -> None:
    if timesheet.user_id != auth.user_id:
        raise ForbiddenError(f"You can only {action} your own timesheets")


async def _audit_transition(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, object] | None,
    after_json: dict[str, object] | None,
) -> None:
    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.TIMESHEET,
        action=action,
        entity_id=timesheet_id,
        before_json=before_json,
        after_json=after_json,
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def _insert_timesheet(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    week_start: date,
) -> Timesheet:
    """Check-then-insert a draft timesheet in one transaction.

    A concurrent insert that wins the race surfaces as an IntegrityError on
    the unique (tenant, user, week_start) constraint and is reported as the
    same conflict.
    """
    conflict_message = f"Timesheet already exists for user {user_id} and week {week_start.isoformat()}"
    timesheet = Timesheet(
        tenant_id=tenant_id,
        user_id=user_id,
        week_start=week_start,
        status=TimesheetStatus.DRAFT.value,
    )
    try:
        async with transaction(session):
            existing = await session.execute(
                select(col(Timesheet.id)).where(
                    col(Timesheet.tenant_id) == tenant_id,
                    col(Timesheet.user_id) == user_id,
                    col(Timesheet.week_start) == week_start,
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(conflict_message)
            session.add(timesheet)
            await session.flush()
    except IntegrityError:
        raise ConflictError(conflict_message) from None

    logger.info("Created timesheet %s for user %s week %s in tenant %s", timesheet.id, user_id, week_start, tenant_id)
    return timesheet


async def create_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateTimesheetPayload,
) -> TimesheetResponse:
    """Create a draft timesheet for the week containing ``payload.week_start``.

    Callers create their own timesheets; creating one for another user
    requires admin or being that user's manager.
    """
    user_id = payload.user_id or auth.user_id
    await authorize_user_access(session, auth, user_id)

    week_start_day = await resolve_week_start_day(session, auth.tenant_id)
    week_start = normalize_week_start(payload.week_start, week_start_day)

    timesheet = await _insert_timesheet(session, auth.tenant_id, user_id, week_start)
    response = build_timesheet_response(timesheet)
    await _audit_transition(session, auth, timesheet.id, AuditAction.CREATE, None, model_to_audit_dict(timesheet))
    return response


async def get_my_current_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    week_start_day: int | None = None,
    today: date | None = None,
) -> CurrentTimesheetResponse:
    """Return the caller's timesheet for the current week, creating a draft if missing.

    Losing the creation race to a concurrent request returns the row that
    request inserted.
    """
    if week_start_day is None:
        week_start_day = await resolve_week_start_day(session, auth.tenant_id)
    week_start = current_week_start(today or date.today(), week_start_day)

    timesheet = await find_timesheet_for_week(session, auth.tenant_id, auth.user_id, week_start)
    if timesheet is not None:
        return CurrentTimesheetResponse(timesheet=build_timesheet_response(timesheet), auto_created=False)

    try:
        timesheet = await _insert_timesheet(session, auth.tenant_id, auth.user_id, week_start)
    except ConflictError:
        existing = await find_timesheet_for_week(session, auth.tenant_id, auth.user_id, week_start)
        if existing is None:
            raise
        logger.info("Timesheet for user %s week %s was created concurrently", auth.user_id, week_start)
        return CurrentTimesheetResponse(timesheet=build_timesheet_response(existing), auto_created=False)

    response = CurrentTimesheetResponse(timesheet=build_timesheet_response(timesheet), auto_created=True)
    await _audit_transition(session, auth, timesheet.id, AuditAction.CREATE, None, model_to_audit_dict(timesheet))
    return response


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def submit_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
) -> TimesheetResponse:
    """Submit a draft timesheet for review. Only the owner may submit."""
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        if timesheet.status != TimesheetStatus.DRAFT.value:
            raise InvalidStateError(f"Timesheet cannot be submitted. Current status: {timesheet.status}")
        _require_owner(timesheet, auth, "submit")

        before_dict = model_to_audit_dict(timesheet)
        timesheet.status = TimesheetStatus.SUBMITTED.value
        timesheet.submitted_at = datetime.now(UTC)
        timesheet.submitted_by = auth.user_id
        await session.flush()
        after_dict = model_to_audit_dict(timesheet)

    response = build_timesheet_response(timesheet)
    logger.info("Timesheet %s submitted by %s in tenant %s", timesheet.id, auth.user_id, auth.tenant_id)
    await _audit_transition(session, auth, timesheet.id, AuditAction.SUBMIT, before_dict, after_dict)
    return response


async def _review_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    new_status: TimesheetStatus,
    note: str | None,
) -> TimesheetResponse:
    """Shared logic for approve and reject."""
    verb = "approved" if new_status == TimesheetStatus.APPROVED else "rejected"
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        if timesheet.status != TimesheetStatus.SUBMITTED.value:
            raise InvalidStateError(f"Timesheet cannot be {verb}. Current status: {timesheet.status}")
        if new_status == TimesheetStatus.REJECTED and not (note and note.strip()):
            raise ValidationError("Review note is required when rejecting a timesheet")

        before_dict = model_to_audit_dict(timesheet)
        timesheet.status = new_status.value
        timesheet.reviewed_at = datetime.now(UTC)
        timesheet.reviewed_by = auth.user_id
        timesheet.review_note = note
        await session.flush()
        after_dict = model_to_audit_dict(timesheet)

    response = build_timesheet_response(timesheet)
    logger.info("Timesheet %s %s by %s in tenant %s", timesheet.id, verb, auth.user_id, auth.tenant_id)
    action = AuditAction.APPROVE if new_status == TimesheetStatus.APPROVED else AuditAction.REJECT
    await _audit_transition(session, auth, timesheet.id, action, before_dict, after_dict)
    return response


async def approve_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    payload: ReviewPayload | None = None,
) -> TimesheetResponse:
    """Approve a submitted timesheet."""
    return await _review_timesheet(
        session, auth, timesheet_id, TimesheetStatus.APPROVED, payload.note if payload else None
    )


async def reject_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
    payload: ReviewPayload | None = None,
) -> TimesheetResponse:
    """Reject a submitted timesheet. A non-blank review note is required."""
    return await _review_timesheet(
        session, auth, timesheet_id, TimesheetStatus.REJECTED, payload.note if payload else None
    )


async def recall_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
) -> RecallResponse:
    """Pull a submitted, not yet reviewed timesheet back to draft.

    Any ``reviewed_at`` value blocks the recall, even while the status
    still reads ``submitted``.
    """
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        if timesheet.status != TimesheetStatus.SUBMITTED.value:
            raise InvalidStateError(
                f"Cannot recall timesheet. Current status: {timesheet.status}. "
                "Only submitted timesheets can be recalled."
            )
        _require_owner(timesheet, auth, "recall")
        if timesheet.reviewed_at is not None:
            raise InvalidStateError("Cannot recall timesheet that has already been reviewed")

        previous_status = TimesheetStatus(timesheet.status)
        before_dict = model_to_audit_dict(timesheet)
        timesheet.status = TimesheetStatus.DRAFT.value
        timesheet.submitted_at = None
        timesheet.submitted_by = None
        await session.flush()
        after_dict = model_to_audit_dict(timesheet)

    response = RecallResponse(
        id=timesheet.id,
        status=TimesheetStatus.DRAFT,
        previous_status=previous_status,
        recalled_at=datetime.now(UTC),
        recalled_by=auth.user_id,
    )
    logger.info("Timesheet %s recalled by %s in tenant %s", timesheet.id, auth.user_id, auth.tenant_id)
    await _audit_transition(session, auth, timesheet.id, AuditAction.RECALL, before_dict, after_dict)
    return response


async def delete_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
) -> None:
    """Delete a draft timesheet together with its time entries."""
    async with transaction(session):
        timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id, for_update=True)
        if timesheet.status != TimesheetStatus.DRAFT.value:
            raise InvalidStateError("Only draft timesheets can be deleted")
        _require_owner(timesheet, auth, "delete")

        before_dict = model_to_audit_dict(timesheet)
        await session.execute(
            delete(TimeEntry).where(
                col(TimeEntry.tenant_id) == timesheet.tenant_id,
                col(TimeEntry.user_id) == timesheet.user_id,
                col(TimeEntry.week_start) == timesheet.week_start,
            )
        )
        await session.delete(timesheet)

    logger.info("Timesheet %s deleted by %s in tenant %s", timesheet_id, auth.user_id, auth.tenant_id)
    await _audit_transition(session, auth, timesheet_id, AuditAction.DELETE, before_dict, None)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_timesheet(
    session: AsyncSession,
    auth: AuthContext,
    timesheet_id: uuid.UUID,
) -> TimesheetDetailResponse:
    """Get a timesheet with its entries.

    Visible to the owner, tenant admins, and the owner's manager.
    """
    timesheet = await get_timesheet_or_404(session, auth.tenant_id, timesheet_id)
    await authorize_user_access(session, auth, timesheet.user_id)

    entries = await list_time_entries(session, timesheet)
    return TimesheetDetailResponse(
        **build_timesheet_response(timesheet).model_dump(),
        time_entries=[build_time_entry_response(e) for e in entries],
    )


async def list_timesheets(
    session: AsyncSession,
    auth: AuthContext,
    filters: TimesheetFilters,
) -> TimesheetListResponse:
    """List timesheets with optional filters, ordered by week_start DESC.

    With ``team`` the listing is restricted to the caller's direct reports;
    a caller without reports gets an empty page.
    """
    base_filters = [col(Timesheet.tenant_id) == auth.tenant_id]

    if filters.team:
        reports = await direct_reports(session, auth.tenant_id, auth.user_id)
        if not reports:
            return TimesheetListResponse(items=[], total=0, page=filters.page, page_size=filters.page_size)
        base_filters.append(col(Timesheet.user_id).in_(reports))
    if filters.user_id is not None:
        base_filters.append(col(Timesheet.user_id) == filters.user_id)
    if filters.week_start is not None:
        base_filters.append(col(Timesheet.week_start) == filters.week_start)
    if filters.status is not None:
        base_filters.append(col(Timesheet.status) == filters.status.value)
    if filters.date_from is not None:
        base_filters.append(col(Timesheet.week_start) >= filters.date_from)
    if filters.date_to is not None:
        base_filters.append(col(Timesheet.week_start) <= filters.date_to)

    count_result = await session.execute(select(func.count()).select_from(Timesheet).where(*base_filters))
    total = count_result.scalar_one()

    total_hours = func.coalesce(func.sum(col(TimeEntry.hours)), 0).label("total_hours")
    result = await session.execute(
        select(Timesheet, total_hours)
        .outerjoin(
            TimeEntry,
            and_(
                col(TimeEntry.tenant_id) == col(Timesheet.tenant_id),
                col(TimeEntry.user_id) == col(Timesheet.user_id),
                col(TimeEntry.week_start) == col(Timesheet.week_start),
            ),
        )
        .where(*base_filters)
        .group_by(col(Timesheet.id))
        .order_by(col(Timesheet.week_start).desc(), col(Timesheet.created_at).desc())
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )

    items = [
        TimesheetSummaryResponse(
            **build_timesheet_response(timesheet).model_dump(),
            total_hours=Decimal(str(hours)),
        )
        for timesheet, hours in result.all()
    ]
    return TimesheetListResponse(items=items, total=total, page=filters.page, page_size=filters.page_size)
