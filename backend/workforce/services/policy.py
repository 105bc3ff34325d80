# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import NotFoundError
from workforce.models.enums import AuditAction, AuditEntity
from workforce.models.policy import TimesheetPolicy
from workforce.schemas.policy import TimesheetPolicyResponse
from workforce.services.audit import model_to_audit_dict, write_audit_log
from workforce.services.weeks import DEFAULT_WEEK_START_DAY

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.schemas.auth import AuthContext
    from workforce.schemas.policy import UpsertTimesheetPolicyPayload

logger = logging.getLogger(__name__)


def _build_policy_response(policy: TimesheetPolicy) -> TimesheetPolicyResponse:
    """Map a policy model to its response schema."""
    return TimesheetPolicyResponse(
        tenant_id=policy.tenant_id,
        week_start_day=policy.week_start_day,
        min_hours_per_day=policy.min_hours_per_day,
        max_hours_per_day=policy.max_hours_per_day,
        min_hours_per_week=policy.min_hours_per_week,
        max_hours_per_week=policy.max_hours_per_week,
        allow_overtime=policy.allow_overtime,
        require_approval=policy.require_approval,
        updated_at=policy.updated_at,
    )


async def resolve_policy(session: AsyncSession, tenant_id: uuid.UUID) -> TimesheetPolicy | None:
    """Return the tenant's timesheet policy, or None when none is configured.

    A missing policy is a valid state: validation then yields soft warnings
    only and week starts default to Monday.
    """
    result = await session.execute(select(TimesheetPolicy).where(col(TimesheetPolicy.tenant_id) == tenant_id))
    return result.scalar_one_or_none()


async def resolve_week_start_day(session: AsyncSession, tenant_id: uuid.UUID) -> int:
    """Return the tenant's week-start day (0=Sunday), defaulting to Monday."""
    policy = await resolve_policy(session, tenant_id)
    if policy is None:
        return DEFAULT_WEEK_START_DAY
    return policy.week_start_day


async def get_policy(session: AsyncSession, tenant_id: uuid.UUID) -> TimesheetPolicyResponse:
    """Fetch the tenant's policy. Raises 404 if none is configured."""
    policy = await resolve_policy(session, tenant_id)
    if policy is None:
        raise NotFoundError("Timesheet policy not found")
    return _build_policy_response(policy)


async def upsert_policy(
    session: AsyncSession,
    auth: AuthContext,
    payload: UpsertTimesheetPolicyPayload,
) -> TimesheetPolicyResponse:
    """Create or replace the tenant's timesheet policy."""
    async with transaction(session):
        result = await session.execute(
            select(TimesheetPolicy).where(col(TimesheetPolicy.tenant_id) == auth.tenant_id).with_for_update()
        )
        policy = result.scalar_one_or_none()
        before_dict = model_to_audit_dict(policy) if policy is not None else None
        if policy is None:
            policy = TimesheetPolicy(tenant_id=auth.tenant_id)
            session.add(policy)
        for field, value in payload.model_dump().items():
            setattr(policy, field, value)
        await session.flush()
        after_dict = model_to_audit_dict(policy)

    response = _build_policy_response(policy)
    logger.info("Timesheet policy %s for tenant %s", "updated" if before_dict else "created", auth.tenant_id)

    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.TIMESHEET_POLICY,
        action=AuditAction.UPDATE if before_dict else AuditAction.CREATE,
        entity_id=auth.tenant_id,
        before_json=before_dict,
        after_json=after_dict,
    )
    return response


async def delete_policy(session: AsyncSession, auth: AuthContext) -> None:
    """Remove the tenant's policy. Validation falls back to soft warnings only."""
    async with transaction(session):
        result = await session.execute(
            select(TimesheetPolicy).where(col(TimesheetPolicy.tenant_id) == auth.tenant_id).with_for_update()
        )
        policy = result.scalar_one_or_none()
        if policy is None:
            raise NotFoundError("Timesheet policy not found")
        before_dict = model_to_audit_dict(policy)
        await session.delete(policy)

    logger.info("Timesheet policy deleted for tenant %s", auth.tenant_id)
    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.TIMESHEET_POLICY,
        action=AuditAction.DELETE,
        entity_id=auth.tenant_id,
        before_json=before_dict,
    )
