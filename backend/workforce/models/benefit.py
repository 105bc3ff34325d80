# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from workforce.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from workforce.models.enums import BenefitUnit


class BenefitType(UUIDBase, TimestampMixin, table=True):
    """Tenant-scoped category of paid leave (vacation, sick, ...)."""

    __tablename__ = "benefit_type"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "key", name="uq_benefit_type_tenant_key"),
        sa.CheckConstraint("unit IN ('days', 'hours')", name="ck_benefit_type_unit"),
    )

    tenant_id: uuid.UUID = Field(index=True)
    key: str = Field(max_length=100)
    name: str = Field(max_length=255)
    unit: str = Field(default=BenefitUnit.DAYS, max_length=10)
    requires_approval: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    allow_negative_balance: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    annual_amount: Decimal = Field(default=Decimal(0), max_digits=6, decimal_places=2)


class BenefitBalance(UUIDBase, UpdatedAtMixin, table=True):
    """Running balance for one (tenant, user, benefit type).

    Written only under a row lock, by leave approvals (debit) and admin
    adjustments.
    """

    __tablename__ = "benefit_balance"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "user_id", "benefit_type_id", name="uq_benefit_balance_user_type"),
    )

    tenant_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    benefit_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("benefit_type.id", ondelete="CASCADE"), nullable=False),
    )
    current_balance: Decimal = Field(default=Decimal(0), max_digits=7, decimal_places=2)
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
