from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from workforce.models import (
    AuditLog,
    BenefitBalance,
    BenefitType,
    LeaveRequest,
    Profile,
    SQLModel,
    TimeEntry,
    Timesheet,
    TimesheetPolicy,
)
from workforce.models.enums import BenefitUnit, LeaveRequestStatus, TimesheetStatus

EXPECTED_TABLES = {
    "audit_log",
    "benefit_balance",
    "benefit_type",
    "leave_request",
    "profile",
    "time_entry",
    "timesheet",
    "timesheet_policy",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_timesheet_defaults() -> None:
    timesheet = Timesheet(tenant_id=uuid.uuid4(), user_id=uuid.uuid4(), week_start=date(2025, 1, 6))
    assert timesheet.status == TimesheetStatus.DRAFT
    assert timesheet.submitted_at is None
    assert timesheet.reviewed_at is None
    assert timesheet.id is not None


def test_timesheet_unique_per_user_week() -> None:
    constraints = {c.name for c in Timesheet.__table__.constraints}  # type: ignore[attr-defined]
    assert "uq_timesheet_user_week" in constraints


def test_time_entry_instantiation() -> None:
    entry = TimeEntry(
        tenant_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        project_id=uuid.uuid4(),
        week_start=date(2025, 1, 6),
        day_of_week=2,
        hours=Decimal("7.5"),
    )
    assert entry.task_id is None
    assert entry.note is None


def test_policy_defaults() -> None:
    policy = TimesheetPolicy(tenant_id=uuid.uuid4())
    assert policy.week_start_day == 1
    assert policy.allow_overtime is True
    assert policy.require_approval is True
    assert policy.max_hours_per_day is None


def test_benefit_type_defaults() -> None:
    benefit_type = BenefitType(tenant_id=uuid.uuid4(), key="pto", name="PTO")
    assert benefit_type.unit == BenefitUnit.DAYS
    assert benefit_type.requires_approval is True
    assert benefit_type.allow_negative_balance is False
    assert benefit_type.annual_amount == Decimal(0)


def test_benefit_balance_defaults() -> None:
    balance = BenefitBalance(tenant_id=uuid.uuid4(), user_id=uuid.uuid4(), benefit_type_id=uuid.uuid4())
    assert balance.current_balance == Decimal(0)
    assert balance.version == 1


def test_leave_request_defaults() -> None:
    request = LeaveRequest(
        tenant_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        benefit_type_id=uuid.uuid4(),
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 2),
        amount=Decimal(2),
    )
    assert request.status == LeaveRequestStatus.PENDING
    assert request.approver_id is None
    assert request.note is None


def test_profile_without_manager() -> None:
    profile = Profile(tenant_id=uuid.uuid4(), user_id=uuid.uuid4())
    assert profile.manager_user_id is None


def test_audit_log_instantiation() -> None:
    log = AuditLog(
        tenant_id=uuid.uuid4(),
        actor_user_id=uuid.uuid4(),
        entity="timesheet",
        entity_id=uuid.uuid4(),
        action="submit",
    )
    assert log.before_json is None
    assert log.after_json is None
