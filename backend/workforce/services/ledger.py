# ruff: noqa: TC003
"""Per-user, per-benefit-type balance ledger.

Balances only move under a row lock: ``debit`` on leave approval and
``credit``/``debit`` on admin adjustments. Both bump ``version``.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import ValidationError
from workforce.models.benefit import BenefitBalance
from workforce.models.enums import AuditAction, AuditEntity
from workforce.schemas.balance import AdjustmentResponse
from workforce.services.audit import model_to_audit_dict, write_audit_log
from workforce.services.benefit_type import get_benefit_type

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.models.benefit import BenefitType
    from workforce.schemas.auth import AuthContext
    from workforce.schemas.balance import CreateAdjustmentPayload

logger = logging.getLogger(__name__)


def format_amount(value: Decimal) -> str:
    """Render an amount without trailing zeros, e.g. ``Decimal("3.50")`` -> ``"3.5"``."""
    return format(value.normalize(), "f")


def insufficient_balance_message(available: Decimal, requested: Decimal) -> str:
    return f"Insufficient balance. Available: {format_amount(available)}, Requested: {format_amount(requested)}"


# ---------------------------------------------------------------------------
# Row access
# ---------------------------------------------------------------------------


async def get_balance(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    benefit_type_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> BenefitBalance | None:
    """Fetch a balance row, optionally under ``SELECT ... FOR UPDATE``."""
    query = select(BenefitBalance).where(
        col(BenefitBalance.tenant_id) == tenant_id,
        col(BenefitBalance.user_id) == user_id,
        col(BenefitBalance.benefit_type_id) == benefit_type_id,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_or_create_balance(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    benefit_type: BenefitType,
    *,
    for_update: bool = False,
) -> BenefitBalance:
    """Return the balance row, inserting it at zero on first use.

    Must run inside the caller's transaction; the new row is flushed, not
    committed.
    """
    balance = await get_balance(session, tenant_id, user_id, benefit_type.id, for_update=for_update)
    if balance is None:
        balance = BenefitBalance(
            tenant_id=tenant_id,
            user_id=user_id,
            benefit_type_id=benefit_type.id,
            current_balance=Decimal(0),
            version=1,
        )
        session.add(balance)
        await session.flush()
        logger.info(
            "Created zero balance for user %s benefit type %s in tenant %s", user_id, benefit_type.key, tenant_id
        )
    return balance


# ---------------------------------------------------------------------------
# Mutations (caller holds the row lock and owns the transaction)
# ---------------------------------------------------------------------------


def debit(balance: BenefitBalance, amount: Decimal, *, allow_negative: bool) -> BenefitBalance:
    """Subtract ``amount`` from a locked balance row.

    Raises ``ValidationError`` when the result would go negative and the
    benefit type does not allow it. This is the check that serializes two
    pending requests that both passed the optimistic check at creation.
    """
    new_balance = balance.current_balance - amount
    if new_balance < 0 and not allow_negative:
        raise ValidationError(insufficient_balance_message(balance.current_balance, amount))
    balance.current_balance = new_balance
    balance.version += 1
    return balance


def credit(balance: BenefitBalance, amount: Decimal) -> BenefitBalance:
    """Add ``amount`` to a locked balance row."""
    balance.current_balance = balance.current_balance + amount
    balance.version += 1
    return balance


# ---------------------------------------------------------------------------
# Admin adjustments
# ---------------------------------------------------------------------------


async def create_adjustment(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateAdjustmentPayload,
) -> AdjustmentResponse:
    """Apply a signed admin adjustment to a user's balance.

    Positive amounts grant, negative amounts deduct under the same
    negative-balance rule as leave approval.
    """
    if payload.amount == 0:
        raise ValidationError("Adjustment amount must not be zero")

    benefit_type = await get_benefit_type(session, auth.tenant_id, payload.benefit_type_id)

    async with transaction(session):
        balance = await get_or_create_balance(
            session, auth.tenant_id, payload.user_id, benefit_type, for_update=True
        )
        before_dict = model_to_audit_dict(balance)
        if payload.amount > 0:
            credit(balance, payload.amount)
        else:
            debit(balance, -payload.amount, allow_negative=benefit_type.allow_negative_balance)
        await session.flush()
        after_dict = model_to_audit_dict(balance) | {"reason": payload.reason}

    response = AdjustmentResponse(
        balance_id=balance.id,
        user_id=balance.user_id,
        benefit_type_id=balance.benefit_type_id,
        amount=payload.amount,
        current_balance=balance.current_balance,
        version=balance.version,
    )
    logger.info(
        "Adjusted balance %s by %s (now %s) in tenant %s",
        balance.id,
        payload.amount,
        balance.current_balance,
        auth.tenant_id,
    )

    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.BENEFIT_BALANCE,
        action=AuditAction.ADJUST,
        entity_id=balance.id,
        before_json=before_dict,
        after_json=after_dict,
    )
    return response
