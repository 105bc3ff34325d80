# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import ConflictError, NotFoundError
from workforce.models.benefit import BenefitBalance, BenefitType
from workforce.models.enums import AuditAction, AuditEntity, BenefitUnit
from workforce.models.leave_request import LeaveRequest
from workforce.schemas.benefit_type import BenefitTypeListResponse, BenefitTypeResponse
from workforce.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.schemas.auth import AuthContext
    from workforce.schemas.benefit_type import CreateBenefitTypePayload, UpdateBenefitTypePayload

logger = logging.getLogger(__name__)


def _build_benefit_type_response(benefit_type: BenefitType) -> BenefitTypeResponse:
    """Map a benefit type model to its response schema."""
    return BenefitTypeResponse(
        id=benefit_type.id,
        tenant_id=benefit_type.tenant_id,
        key=benefit_type.key,
        name=benefit_type.name,
        unit=BenefitUnit(benefit_type.unit),
        requires_approval=benefit_type.requires_approval,
        allow_negative_balance=benefit_type.allow_negative_balance,
        annual_amount=benefit_type.annual_amount,
        created_at=benefit_type.created_at,
    )


async def find_benefit_type(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    benefit_type_id: uuid.UUID,
) -> BenefitType | None:
    """Return the benefit type if it exists within the tenant."""
    result = await session.execute(
        select(BenefitType).where(
            col(BenefitType.id) == benefit_type_id,
            col(BenefitType.tenant_id) == tenant_id,
        )
    )
    return result.scalar_one_or_none()


async def get_benefit_type(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    benefit_type_id: uuid.UUID,
) -> BenefitType:
    """Fetch a benefit type scoped to tenant. Raises 404 if not found."""
    benefit_type = await find_benefit_type(session, tenant_id, benefit_type_id)
    if benefit_type is None:
        raise NotFoundError("Benefit type not found")
    return benefit_type


async def list_benefit_types(session: AsyncSession, tenant_id: uuid.UUID) -> BenefitTypeListResponse:
    """List the tenant's benefit types ordered by key."""
    result = await session.execute(
        select(BenefitType).where(col(BenefitType.tenant_id) == tenant_id).order_by(col(BenefitType.key))
    )
    items = [_build_benefit_type_response(bt) for bt in result.scalars().all()]
    return BenefitTypeListResponse(items=items, total=len(items))


async def create_benefit_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateBenefitTypePayload,
) -> BenefitTypeResponse:
    """Define a new benefit type. Raises 409 on a duplicate key."""
    existing = await session.execute(
        select(col(BenefitType.id)).where(
            col(BenefitType.tenant_id) == auth.tenant_id,
            col(BenefitType.key) == payload.key,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Benefit type with this key already exists")

    benefit_type = BenefitType(
        tenant_id=auth.tenant_id,
        key=payload.key,
        name=payload.name,
        unit=payload.unit.value,
        requires_approval=payload.requires_approval,
        allow_negative_balance=payload.allow_negative_balance,
        annual_amount=payload.annual_amount,
    )
    try:
        async with transaction(session):
            session.add(benefit_type)
    except IntegrityError:
        raise ConflictError("Benefit type with this key already exists") from None

    response = _build_benefit_type_response(benefit_type)
    logger.info("Created benefit type %s in tenant %s", benefit_type.key, auth.tenant_id)

    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.BENEFIT_TYPE,
        action=AuditAction.CREATE,
        entity_id=benefit_type.id,
        after_json=model_to_audit_dict(benefit_type),
    )
    return response


async def get_benefit_type_detail(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    benefit_type_id: uuid.UUID,
) -> BenefitTypeResponse:
    """Get a single benefit type by ID."""
    benefit_type = await get_benefit_type(session, tenant_id, benefit_type_id)
    return _build_benefit_type_response(benefit_type)


async def update_benefit_type(
    session: AsyncSession,
    auth: AuthContext,
    benefit_type_id: uuid.UUID,
    payload: UpdateBenefitTypePayload,
) -> BenefitTypeResponse:
    """Change a benefit type's settings. Balances already booked are not touched."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    async with transaction(session):
        benefit_type = await get_benefit_type(session, auth.tenant_id, benefit_type_id)
        before_dict = model_to_audit_dict(benefit_type)
        for field, value in changes.items():
            setattr(benefit_type, field, value.value if isinstance(value, BenefitUnit) else value)
        await session.flush()
        after_dict = model_to_audit_dict(benefit_type)

    response = _build_benefit_type_response(benefit_type)
    logger.info("Updated benefit type %s in tenant %s: %s", benefit_type.key, auth.tenant_id, sorted(changes))

    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.BENEFIT_TYPE,
        action=AuditAction.UPDATE,
        entity_id=benefit_type.id,
        before_json=before_dict,
        after_json=after_dict,
    )
    return response


async def delete_benefit_type(
    session: AsyncSession,
    auth: AuthContext,
    benefit_type_id: uuid.UUID,
) -> None:
    """Delete a benefit type that no balance or leave request refers to."""
    async with transaction(session):
        benefit_type = await get_benefit_type(session, auth.tenant_id, benefit_type_id)
        balances = await session.execute(
            select(func.count())
            .select_from(BenefitBalance)
            .where(col(BenefitBalance.benefit_type_id) == benefit_type_id)
        )
        requests = await session.execute(
            select(func.count())
            .select_from(LeaveRequest)
            .where(col(LeaveRequest.benefit_type_id) == benefit_type_id)
        )
        if balances.scalar_one() or requests.scalar_one():
            raise ConflictError("Benefit type is in use and cannot be deleted")
        before_dict = model_to_audit_dict(benefit_type)
        await session.delete(benefit_type)

    logger.info("Deleted benefit type %s in tenant %s", before_dict["key"], auth.tenant_id)
    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.BENEFIT_TYPE,
        action=AuditAction.DELETE,
        entity_id=benefit_type_id,
        before_json=before_dict,
    )
