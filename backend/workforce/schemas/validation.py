# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime

from pydantic import BaseModel

from workforce.models.enums import TimesheetStatus, ValidationIssueType, ValidationSeverity


class ValidationIssue(BaseModel):
    """A single validator finding."""

    type: ValidationIssueType
    severity: ValidationSeverity
    message: str
    day_of_week: int | None = None
    date: datetime.date | None = None
    hours: float | None = None
    max_allowed: float | None = None
    missing_dates: list[datetime.date] | None = None


class ValidationSummary(BaseModel):
    """Aggregates over a timesheet's entries."""

    total_hours: float
    days_with_entries: int
    entry_count: int
    project_count: int
    status: TimesheetStatus


class ValidationReport(BaseModel):
    """Result of validating a timesheet against its tenant policy."""

    valid: bool
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    summary: ValidationSummary
