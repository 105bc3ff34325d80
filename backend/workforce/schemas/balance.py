# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from workforce.models.enums import BenefitUnit

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BenefitBalanceResponse(BaseModel):
    """Balance for a single benefit type."""

    id: uuid.UUID
    benefit_type_id: uuid.UUID
    benefit_type_key: str
    benefit_type_name: str
    unit: BenefitUnit
    requires_approval: bool
    current_balance: Decimal
    total_amount: str
    used_amount: str  # total_amount - current_balance, two decimals
    updated_at: datetime | None


class BenefitBalanceListResponse(BaseModel):
    """All benefit balances for a user."""

    user_id: uuid.UUID
    items: list[BenefitBalanceResponse]
    total: int


# ---------------------------------------------------------------------------
# Adjustment schemas
# ---------------------------------------------------------------------------


class CreateAdjustmentPayload(BaseModel):
    """Request body for an admin balance adjustment."""

    user_id: uuid.UUID
    benefit_type_id: uuid.UUID
    amount: Decimal = Field(
        max_digits=7,
        decimal_places=2,
        description="Signed amount: positive to grant, negative to deduct",
    )
    reason: str = Field(min_length=1, max_length=1000)


class AdjustmentResponse(BaseModel):
    """Balance state after an adjustment."""

    balance_id: uuid.UUID
    user_id: uuid.UUID
    benefit_type_id: uuid.UUID
    amount: Decimal
    current_balance: Decimal
    version: int
