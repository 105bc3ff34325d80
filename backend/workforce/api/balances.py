# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from workforce.api.deps import AdminDep, AuthDep, validate_tenant_scope
from workforce.db import SessionDep
from workforce.schemas.balance import AdjustmentResponse, BenefitBalanceListResponse, CreateAdjustmentPayload
from workforce.services import ledger as ledger_service
from workforce.services.leave_request import get_user_benefit_balances
from workforce.services.manager_scope import authorize_user_access

user_balance_router = APIRouter(
    prefix="/tenants/{tenant_id}/users/{user_id}/balances",
    tags=["balances"],
    dependencies=[Depends(validate_tenant_scope)],
)

adjustment_router = APIRouter(
    prefix="/tenants/{tenant_id}/balance-adjustments",
    tags=["balances"],
    dependencies=[Depends(validate_tenant_scope)],
)


@user_balance_router.get("", response_model=BenefitBalanceListResponse)
async def get_user_balances(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BenefitBalanceListResponse:
    """Get a user's benefit balances (self, manager, or admin)."""
    await authorize_user_access(session, auth, user_id)
    return await get_user_benefit_balances(session, auth.tenant_id, user_id)


@adjustment_router.post("", response_model=AdjustmentResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentPayload,
    session: SessionDep,
    auth: AdminDep,
) -> AdjustmentResponse:
    """Grant or deduct balance for a user (admin only)."""
    return await ledger_service.create_adjustment(session, auth, payload)
