"""Builders shared by the test modules."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from workforce.models.benefit import BenefitBalance, BenefitType
from workforce.models.enums import BenefitUnit, Role
from workforce.models.policy import TimesheetPolicy
from workforce.models.profile import Profile
from workforce.schemas.auth import AuthContext

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def make_auth(tenant_id: uuid.UUID, user_id: uuid.UUID | None = None, role: Role = Role.EMPLOYEE) -> AuthContext:
    """Build a caller identity for service-level tests."""
    return AuthContext(tenant_id=tenant_id, user_id=user_id or uuid.uuid4(), role=role)


def make_headers(auth: AuthContext) -> dict[str, str]:
    """Build the identity headers the auth gateway would set for ``auth``."""
    return {
        "X-Tenant-Id": str(auth.tenant_id),
        "X-User-Id": str(auth.user_id),
        "X-Role": auth.role.value,
    }


async def add_benefit_type(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    key: str = "pto",
    *,
    allow_negative_balance: bool = False,
    annual_amount: Decimal = Decimal(20),
) -> BenefitType:
    benefit_type = BenefitType(
        tenant_id=tenant_id,
        key=key,
        name=key.upper(),
        unit=BenefitUnit.DAYS.value,
        allow_negative_balance=allow_negative_balance,
        annual_amount=annual_amount,
    )
    session.add(benefit_type)
    await session.commit()
    return benefit_type


async def set_balance(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    benefit_type: BenefitType,
    amount: Decimal,
) -> BenefitBalance:
    balance = BenefitBalance(
        tenant_id=tenant_id,
        user_id=user_id,
        benefit_type_id=benefit_type.id,
        current_balance=amount,
    )
    session.add(balance)
    await session.commit()
    return balance


async def add_profile(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    manager_user_id: uuid.UUID | None = None,
) -> Profile:
    profile = Profile(tenant_id=tenant_id, user_id=user_id, manager_user_id=manager_user_id)
    session.add(profile)
    await session.commit()
    return profile


async def add_policy(session: AsyncSession, tenant_id: uuid.UUID, **fields: object) -> TimesheetPolicy:
    policy = TimesheetPolicy(tenant_id=tenant_id, **fields)
    session.add(policy)
    await session.commit()
    return policy
