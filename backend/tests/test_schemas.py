"""Unit tests for request payload schemas."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from workforce.schemas.balance import CreateAdjustmentPayload
from workforce.schemas.benefit_type import CreateBenefitTypePayload
from workforce.schemas.leave_request import CreateLeaveRequestPayload
from workforce.schemas.policy import UpsertTimesheetPolicyPayload
from workforce.schemas.timesheet import UpsertTimeEntryPayload

# ---------------------------------------------------------------------------
# UpsertTimesheetPolicyPayload
# ---------------------------------------------------------------------------


def test_policy_defaults() -> None:
    payload = UpsertTimesheetPolicyPayload()
    assert payload.week_start_day == 1
    assert payload.allow_overtime is True
    assert payload.max_hours_per_day is None


@pytest.mark.parametrize("day", [-1, 7])
def test_policy_week_start_day_range(day: int) -> None:
    with pytest.raises(ValidationError):
        UpsertTimesheetPolicyPayload(week_start_day=day)


def test_policy_min_over_max_per_day_rejected() -> None:
    with pytest.raises(ValidationError, match="min_hours_per_day must not exceed max_hours_per_day"):
        UpsertTimesheetPolicyPayload(min_hours_per_day=Decimal(10), max_hours_per_day=Decimal(8))


def test_policy_min_over_max_per_week_rejected() -> None:
    with pytest.raises(ValidationError, match="min_hours_per_week"):
        UpsertTimesheetPolicyPayload(min_hours_per_week=Decimal(50), max_hours_per_week=Decimal(40))


def test_policy_daily_hours_capped_at_24() -> None:
    with pytest.raises(ValidationError):
        UpsertTimesheetPolicyPayload(max_hours_per_day=Decimal(25))


# ---------------------------------------------------------------------------
# UpsertTimeEntryPayload
# ---------------------------------------------------------------------------


def test_time_entry_valid() -> None:
    payload = UpsertTimeEntryPayload(project_id=uuid.uuid4(), day_of_week=6, hours=Decimal("7.25"))
    assert payload.task_id is None
    assert payload.hours == Decimal("7.25")


@pytest.mark.parametrize("day", [-1, 7])
def test_time_entry_day_out_of_range(day: int) -> None:
    with pytest.raises(ValidationError):
        UpsertTimeEntryPayload(project_id=uuid.uuid4(), day_of_week=day, hours=Decimal(1))


def test_time_entry_negative_hours() -> None:
    with pytest.raises(ValidationError):
        UpsertTimeEntryPayload(project_id=uuid.uuid4(), day_of_week=0, hours=Decimal(-1))


# ---------------------------------------------------------------------------
# CreateLeaveRequestPayload
# ---------------------------------------------------------------------------


def test_leave_request_single_day() -> None:
    payload = CreateLeaveRequestPayload(
        benefit_type_id=uuid.uuid4(), start_date=date(2025, 7, 1), end_date=date(2025, 7, 1), amount=Decimal(1)
    )
    assert payload.note is None


def test_leave_request_end_before_start() -> None:
    with pytest.raises(ValidationError, match="end_date must not be before start_date"):
        CreateLeaveRequestPayload(
            benefit_type_id=uuid.uuid4(), start_date=date(2025, 7, 2), end_date=date(2025, 7, 1), amount=Decimal(1)
        )


@pytest.mark.parametrize("amount", [Decimal(0), Decimal(-2)])
def test_leave_request_amount_must_be_positive(amount: Decimal) -> None:
    with pytest.raises(ValidationError):
        CreateLeaveRequestPayload(
            benefit_type_id=uuid.uuid4(), start_date=date(2025, 7, 1), end_date=date(2025, 7, 1), amount=amount
        )


# ---------------------------------------------------------------------------
# Benefit types and adjustments
# ---------------------------------------------------------------------------


def test_benefit_type_key_pattern() -> None:
    assert CreateBenefitTypePayload(key="sick-leave", name="Sick leave").key == "sick-leave"
    with pytest.raises(ValidationError):
        CreateBenefitTypePayload(key="Sick Leave", name="Sick leave")


def test_adjustment_requires_reason() -> None:
    with pytest.raises(ValidationError):
        CreateAdjustmentPayload(user_id=uuid.uuid4(), benefit_type_id=uuid.uuid4(), amount=Decimal(1), reason="")


def test_adjustment_accepts_negative_amount() -> None:
    payload = CreateAdjustmentPayload(
        user_id=uuid.uuid4(), benefit_type_id=uuid.uuid4(), amount=Decimal("-1.5"), reason="Correction"
    )
    assert payload.amount == Decimal("-1.5")
