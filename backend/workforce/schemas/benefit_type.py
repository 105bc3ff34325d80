# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from workforce.models.enums import BenefitUnit


class CreateBenefitTypePayload(BaseModel):
    """Request body for defining a benefit type."""

    key: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9_-]+$")
    name: str = Field(min_length=1, max_length=255)
    unit: BenefitUnit = BenefitUnit.DAYS
    requires_approval: bool = True
    allow_negative_balance: bool = False
    annual_amount: Decimal = Field(default=Decimal(0), ge=0, max_digits=6, decimal_places=2)


class UpdateBenefitTypePayload(BaseModel):
    """Request body for changing a benefit type. The key is immutable; omitted
    fields keep their current value.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    unit: BenefitUnit | None = None
    requires_approval: bool | None = None
    allow_negative_balance: bool | None = None
    annual_amount: Decimal | None = Field(default=None, ge=0, max_digits=6, decimal_places=2)


class BenefitTypeResponse(BaseModel):
    """Response schema for a benefit type."""

    id: uuid.UUID
    tenant_id: uuid.UUID
    key: str
    name: str
    unit: BenefitUnit
    requires_approval: bool
    allow_negative_balance: bool
    annual_amount: Decimal
    created_at: datetime


class BenefitTypeListResponse(BaseModel):
    """All benefit types for a tenant."""

    items: list[BenefitTypeResponse]
    total: int
