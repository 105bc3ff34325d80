# ruff: noqa: TC003
"""Read-only validation of a timesheet against its tenant policy.

A missing policy is valid: only the coverage warning can fire then. The
report is a pure function of the timesheet, its entries and the policy,
so repeated calls on unchanged data return identical reports.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from workforce.models.enums import TimesheetStatus, ValidationIssueType, ValidationSeverity
from workforce.schemas.validation import ValidationIssue, ValidationReport, ValidationSummary
from workforce.services.manager_scope import authorize_user_access
from workforce.services.policy import resolve_policy
from workforce.services.timesheet import get_timesheet_or_404, list_time_entries
from workforce.services.weeks import WORKING_DAYS_PER_WEEK, date_for_day, working_dates

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.models.policy import TimesheetPolicy
    from workforce.models.timesheet import TimeEntry, Timesheet
    from workforce.schemas.auth import AuthContext


def _check_daily_limits(
    entries: list[TimeEntry],
    week_start: date,
    policy: TimesheetPolicy | None,
) -> list[ValidationIssue]:
    if policy is None or policy.max_hours_per_day is None:
        return []
    limit = policy.max_hours_per_day
    return [
        ValidationIssue(
            type=ValidationIssueType.MAX_HOURS_EXCEEDED,
            severity=ValidationSeverity.ERROR,
            message=f"Entry exceeds maximum of {limit} hours per day ({entry.hours} hours logged)",
            day_of_week=entry.day_of_week,
            date=date_for_day(week_start, entry.day_of_week),
            hours=float(entry.hours),
            max_allowed=float(limit),
        )
        for entry in entries
        if entry.hours > limit
    ]


def _check_weekly_limits(
    total: Decimal,
    policy: TimesheetPolicy | None,
) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    """Return (errors, warnings) for the weekly total."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    if policy is None:
        return errors, warnings

    if policy.max_hours_per_week is not None and total > policy.max_hours_per_week:
        limit = policy.max_hours_per_week
        if policy.allow_overtime:
            warnings.append(
                ValidationIssue(
                    type=ValidationIssueType.OVERTIME,
                    severity=ValidationSeverity.WARNING,
                    message=f"Total of {total} hours includes overtime beyond {limit} hours per week",
                    hours=float(total),
                    max_allowed=float(limit),
                )
            )
        else:
            errors.append(
                ValidationIssue(
                    type=ValidationIssueType.WEEKLY_HOURS_EXCEEDED,
                    severity=ValidationSeverity.ERROR,
                    message=f"Total of {total} hours exceeds maximum of {limit} hours per week",
                    hours=float(total),
                    max_allowed=float(limit),
                )
            )

    if policy.min_hours_per_week is not None and total < policy.min_hours_per_week:
        warnings.append(
            ValidationIssue(
                type=ValidationIssueType.LOW_HOURS,
                severity=ValidationSeverity.WARNING,
                message=f"Total of {total} hours is below the minimum of {policy.min_hours_per_week} hours per week",
                hours=float(total),
            )
        )
    return errors, warnings


def build_report(
    timesheet: Timesheet,
    entries: list[TimeEntry],
    policy: TimesheetPolicy | None,
) -> ValidationReport:
    """Evaluate the validation rules for already-loaded data.

    ``entries`` must be ordered by day; issues follow that order.
    """
    total = sum((entry.hours for entry in entries), Decimal(0))
    days_with_entries = sorted({entry.day_of_week for entry in entries})

    errors = _check_daily_limits(entries, timesheet.week_start, policy)
    warnings: list[ValidationIssue] = []

    # Weekend entries do not cover a missing weekday.
    logged = {date_for_day(timesheet.week_start, day) for day in days_with_entries}
    missing = [d for d in working_dates(timesheet.week_start) if d not in logged]
    if missing:
        covered = WORKING_DAYS_PER_WEEK - len(missing)
        warnings.append(
            ValidationIssue(
                type=ValidationIssueType.NO_ENTRIES,
                severity=ValidationSeverity.WARNING,
                message=f"Only {covered} of {WORKING_DAYS_PER_WEEK} working days have time entries",
                missing_dates=missing,
            )
        )

    weekly_errors, weekly_warnings = _check_weekly_limits(total, policy)
    errors.extend(weekly_errors)
    warnings.extend(weekly_warnings)

    return ValidationReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        summary=ValidationSummary(
            total_hours=float(total),
            days_with_entries=len(days_with_entries),
            entry_count=len(entries),
            project_count=len({entry.project_id for entry in entries}),
            status=TimesheetStatus(timesheet.status),
        ),
    )


async def validate_timesheet(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    timesheet_id: uuid.UUID,
    *,
    auth: AuthContext | None = None,
) -> ValidationReport:
    """Validate a timesheet. Raises 404 if it does not exist in the tenant.

    With ``auth`` the report is limited to the readers of the timesheet
    itself: its owner, tenant admins and the owner's manager.
    """
    timesheet = await get_timesheet_or_404(session, tenant_id, timesheet_id)
    if auth is not None:
        await authorize_user_access(session, auth, timesheet.user_id)
    policy = await resolve_policy(session, tenant_id)
    entries = await list_time_entries(session, timesheet)
    return build_report(timesheet, entries, policy)
