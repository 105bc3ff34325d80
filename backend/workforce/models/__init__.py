from sqlmodel import SQLModel

from workforce.models.audit import AuditLog
from workforce.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from workforce.models.benefit import BenefitBalance, BenefitType
from workforce.models.enums import (
    AuditAction,
    AuditEntity,
    BenefitUnit,
    LeaveRequestStatus,
    Role,
    TimesheetStatus,
    ValidationIssueType,
    ValidationSeverity,
)
from workforce.models.leave_request import LeaveRequest
from workforce.models.policy import TimesheetPolicy
from workforce.models.profile import Profile
from workforce.models.timesheet import TimeEntry, Timesheet

__all__ = [
    "AuditAction",
    "AuditEntity",
    "AuditLog",
    "BenefitBalance",
    "BenefitType",
    "BenefitUnit",
    "LeaveRequest",
    "LeaveRequestStatus",
    "Profile",
    "Role",
    "SQLModel",
    "TimeEntry",
    "Timesheet",
    "TimesheetPolicy",
    "TimesheetStatus",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
    "ValidationIssueType",
    "ValidationSeverity",
]
