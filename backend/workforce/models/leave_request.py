# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from workforce.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from workforce.models.enums import LeaveRequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A user's request to draw on a benefit balance."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_team_view", "tenant_id", "status", "start_date", "end_date", "user_id"),
        sa.CheckConstraint("amount > 0", name="ck_leave_request_amount"),
    )

    tenant_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    benefit_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("benefit_type.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    start_date: date
    end_date: date
    amount: Decimal = Field(max_digits=6, decimal_places=2)
    status: str = Field(
        default=LeaveRequestStatus.PENDING, max_length=20, sa_column_kwargs={"server_default": "pending"}
    )
    approver_id: uuid.UUID | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    note: str | None = None
