from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Caller role injected by upstream authentication."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class TimesheetStatus(enum.StrEnum):
    """State machine for weekly timesheets."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveRequestStatus(enum.StrEnum):
    """State machine for leave (benefit) requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class BenefitUnit(enum.StrEnum):
    """Unit in which a benefit type is measured."""

    DAYS = "days"
    HOURS = "hours"


class ValidationIssueType(enum.StrEnum):
    """Kinds of findings produced by the timesheet validator."""

    MAX_HOURS_EXCEEDED = "max_hours_exceeded"
    WEEKLY_HOURS_EXCEEDED = "weekly_hours_exceeded"
    OVERTIME = "overtime"
    NO_ENTRIES = "no_entries"
    LOW_HOURS = "low_hours"


class ValidationSeverity(enum.StrEnum):
    """Whether a validator finding blocks validity."""

    ERROR = "error"
    WARNING = "warning"


class AuditEntity(enum.StrEnum):
    """Entity recorded in the audit log."""

    TIMESHEET = "timesheet"
    TIME_ENTRY = "time_entry"
    TIMESHEET_POLICY = "timesheet_policy"
    LEAVE_REQUEST = "leave_request"
    BENEFIT_BALANCE = "benefit_balance"
    BENEFIT_TYPE = "benefit_type"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    RECALL = "recall"
    CANCEL = "cancel"
    ADJUST = "adjust"
