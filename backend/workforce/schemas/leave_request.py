# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from workforce.models.enums import LeaveRequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for filing a leave request."""

    benefit_type_id: uuid.UUID
    start_date: date
    end_date: date
    amount: Decimal = Field(gt=0, max_digits=6, decimal_places=2)
    note: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class LeaveDecisionPayload(BaseModel):
    """Request body for approve/reject actions."""

    note: str | None = Field(default=None, max_length=1000)


class LeaveRequestFilters(BaseModel):
    """Filters accepted by the leave request listing."""

    mine: bool = False
    team: bool = False
    status: LeaveRequestStatus | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    benefit_type_id: uuid.UUID
    start_date: date
    end_date: date
    amount: Decimal
    status: LeaveRequestStatus
    approver_id: uuid.UUID | None
    approved_at: datetime | None
    note: str | None
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int
    page: int
    page_size: int
