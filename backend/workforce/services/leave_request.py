# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from workforce.db import transaction
from workforce.exceptions import InvalidStateError, NotFoundError, ValidationError
from workforce.models.benefit import BenefitBalance, BenefitType
from workforce.models.enums import AuditAction, AuditEntity, BenefitUnit, LeaveRequestStatus
from workforce.models.leave_request import LeaveRequest
from workforce.schemas.balance import BenefitBalanceListResponse, BenefitBalanceResponse
from workforce.schemas.leave_request import LeaveRequestListResponse, LeaveRequestResponse
from workforce.services.audit import model_to_audit_dict, write_audit_log
from workforce.services.benefit_type import find_benefit_type, get_benefit_type
from workforce.services.ledger import debit, get_or_create_balance, insufficient_balance_message
from workforce.services.manager_scope import direct_reports

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.schemas.auth import AuthContext
    from workforce.schemas.leave_request import (
        CreateLeaveRequestPayload,
        LeaveDecisionPayload,
        LeaveRequestFilters,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a leave request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        tenant_id=request.tenant_id,
        user_id=request.user_id,
        benefit_type_id=request.benefit_type_id,
        start_date=request.start_date,
        end_date=request.end_date,
        amount=request.amount,
        status=LeaveRequestStatus(request.status),
        approver_id=request.approver_id,
        approved_at=request.approved_at,
        note=request.note,
        created_at=request.created_at,
    )


async def _get_leave_request_or_404(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a leave request by ID scoped to tenant. Raises 404 if not found."""
    query = select(LeaveRequest).where(
        col(LeaveRequest.id) == request_id,
        col(LeaveRequest.tenant_id) == tenant_id,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError(f"Leave request with ID {request_id} not found")
    return request


async def _audit(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, object] | None,
    after_json: dict[str, object],
) -> None:
    await write_audit_log(
        session,
        tenant_id=auth.tenant_id,
        actor_user_id=auth.user_id,
        entity=AuditEntity.LEAVE_REQUEST,
        action=action,
        entity_id=request_id,
        before_json=before_json,
        after_json=after_json,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """File a pending leave request for the caller.

    The balance check here is optimistic; approval re-checks it under a row
    lock.
    """
    benefit_type = await find_benefit_type(session, auth.tenant_id, payload.benefit_type_id)
    if benefit_type is None:
        raise ValidationError("Invalid benefit type")

    async with transaction(session):
        balance = await get_or_create_balance(session, auth.tenant_id, auth.user_id, benefit_type)
        if not benefit_type.allow_negative_balance and balance.current_balance < payload.amount:
            raise ValidationError(insufficient_balance_message(balance.current_balance, payload.amount))

        request = LeaveRequest(
            tenant_id=auth.tenant_id,
            user_id=auth.user_id,
            benefit_type_id=benefit_type.id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            amount=payload.amount,
            status=LeaveRequestStatus.PENDING.value,
            note=payload.note,
        )
        session.add(request)
        await session.flush()

    response = _build_leave_request_response(request)
    logger.info(
        "Leave request %s filed by %s for %s %s in tenant %s",
        request.id,
        auth.user_id,
        request.amount,
        benefit_type.key,
        auth.tenant_id,
    )
    await _audit(session, auth, request.id, AuditAction.CREATE, None, model_to_audit_dict(request))
    return response


async def approve_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: LeaveDecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and debit the requester's balance.

    The status change and the debit commit together. The balance row is
    read under ``FOR UPDATE`` inside the same transaction, so concurrent
    approvals against one balance serialize instead of losing an update.
    """
    async with transaction(session):
        request = await _get_leave_request_or_404(session, auth.tenant_id, request_id, for_update=True)
        if request.status != LeaveRequestStatus.PENDING.value:
            raise InvalidStateError(f"Cannot approve request with status: {request.status}")

        benefit_type = await get_benefit_type(session, auth.tenant_id, request.benefit_type_id)
        before_dict = model_to_audit_dict(request)

        request.status = LeaveRequestStatus.APPROVED.value
        request.approver_id = auth.user_id
        request.approved_at = datetime.now(UTC)
        if payload is not None and payload.note:
            request.note = payload.note

        balance = await get_or_create_balance(
            session, request.tenant_id, request.user_id, benefit_type, for_update=True
        )
        debit(balance, request.amount, allow_negative=benefit_type.allow_negative_balance)
        await session.flush()
        after_dict = model_to_audit_dict(request)
        remaining = balance.current_balance

    response = _build_leave_request_response(request)
    logger.info(
        "Leave request %s approved by %s; balance %s now %s in tenant %s",
        request.id,
        auth.user_id,
        balance.id,
        remaining,
        auth.tenant_id,
    )
    await _audit(session, auth, request.id, AuditAction.APPROVE, before_dict, after_dict)
    return response


async def reject_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: LeaveDecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Reject a pending request. The balance is not touched."""
    async with transaction(session):
        request = await _get_leave_request_or_404(session, auth.tenant_id, request_id, for_update=True)
        if request.status != LeaveRequestStatus.PENDING.value:
            raise InvalidStateError(f"Cannot reject request with status: {request.status}")

        before_dict = model_to_audit_dict(request)
        request.status = LeaveRequestStatus.REJECTED.value
        request.approver_id = auth.user_id
        request.approved_at = datetime.now(UTC)
        if payload is not None and payload.note:
            request.note = payload.note
        await session.flush()
        after_dict = model_to_audit_dict(request)

    response = _build_leave_request_response(request)
    logger.info("Leave request %s rejected by %s in tenant %s", request.id, auth.user_id, auth.tenant_id)
    await _audit(session, auth, request.id, AuditAction.REJECT, before_dict, after_dict)
    return response


async def cancel_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel the caller's own pending request. The balance is not touched."""
    async with transaction(session):
        request = await _get_leave_request_or_404(session, auth.tenant_id, request_id, for_update=True)
        if request.user_id != auth.user_id:
            raise ValidationError("You can only cancel your own requests")
        if request.status != LeaveRequestStatus.PENDING.value:
            raise InvalidStateError(f"Cannot cancel request with status: {request.status}")

        before_dict = model_to_audit_dict(request)
        request.status = LeaveRequestStatus.CANCELLED.value
        await session.flush()
        after_dict = model_to_audit_dict(request)

    response = _build_leave_request_response(request)
    logger.info("Leave request %s cancelled by %s in tenant %s", request.id, auth.user_id, auth.tenant_id)
    await _audit(session, auth, request.id, AuditAction.CANCEL, before_dict, after_dict)
    return response


async def get_leave_request(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single leave request by ID."""
    request = await _get_leave_request_or_404(session, tenant_id, request_id)
    return _build_leave_request_response(request)


async def list_leave_requests(
    session: AsyncSession,
    auth: AuthContext,
    filters: LeaveRequestFilters,
) -> LeaveRequestListResponse:
    """List leave requests with optional filters, ordered by created_at DESC.

    ``team`` takes precedence over ``mine`` and restricts the listing to the
    caller's direct reports. The date range matches requests that overlap
    it.
    """
    base_filters = [col(LeaveRequest.tenant_id) == auth.tenant_id]

    if filters.team:
        reports = await direct_reports(session, auth.tenant_id, auth.user_id)
        if not reports:
            return LeaveRequestListResponse(items=[], total=0, page=filters.page, page_size=filters.page_size)
        base_filters.append(col(LeaveRequest.user_id).in_(reports))
    elif filters.mine:
        base_filters.append(col(LeaveRequest.user_id) == auth.user_id)

    if filters.status is not None:
        base_filters.append(col(LeaveRequest.status) == filters.status.value)
    if filters.date_to is not None:
        base_filters.append(col(LeaveRequest.start_date) <= filters.date_to)
    if filters.date_from is not None:
        base_filters.append(col(LeaveRequest.end_date) >= filters.date_from)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.id))
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_leave_request_response(r) for r in requests],
        total=total,
        page=filters.page,
        page_size=filters.page_size,
    )


async def get_user_benefit_balances(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
) -> BenefitBalanceListResponse:
    """Get every balance row the user has, with its benefit type's allocation.

    ``used_amount`` is derived as ``total_amount - current_balance``.
    """
    result = await session.execute(
        select(BenefitBalance, BenefitType)
        .join(BenefitType, col(BenefitType.id) == col(BenefitBalance.benefit_type_id))
        .where(
            col(BenefitBalance.tenant_id) == tenant_id,
            col(BenefitBalance.user_id) == user_id,
        )
        .order_by(col(BenefitType.key))
    )

    items = [
        BenefitBalanceResponse(
            id=balance.id,
            benefit_type_id=balance.benefit_type_id,
            benefit_type_key=benefit_type.key,
            benefit_type_name=benefit_type.name,
            unit=BenefitUnit(benefit_type.unit),
            requires_approval=benefit_type.requires_approval,
            current_balance=balance.current_balance,
            total_amount=f"{benefit_type.annual_amount:.2f}",
            used_amount=f"{benefit_type.annual_amount - balance.current_balance:.2f}",
            updated_at=balance.updated_at,
        )
        for balance, benefit_type in result.all()
    ]
    return BenefitBalanceListResponse(user_id=user_id, items=items, total=len(items))
