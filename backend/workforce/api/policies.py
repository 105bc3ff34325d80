# ruff: noqa: TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, Depends

from workforce.api.deps import AdminDep, AuthDep, validate_tenant_scope
from workforce.db import SessionDep
from workforce.schemas.policy import TimesheetPolicyResponse, UpsertTimesheetPolicyPayload
from workforce.services import policy as policy_service

router = APIRouter(
    prefix="/tenants/{tenant_id}/timesheet-policy",
    tags=["policies"],
    dependencies=[Depends(validate_tenant_scope)],
)


@router.get("", response_model=TimesheetPolicyResponse)
async def get_policy(
    session: SessionDep,
    auth: AuthDep,
) -> TimesheetPolicyResponse:
    """Get the tenant's timesheet policy."""
    return await policy_service.get_policy(session, auth.tenant_id)


@router.put("", response_model=TimesheetPolicyResponse)
async def upsert_policy(
    payload: UpsertTimesheetPolicyPayload,
    session: SessionDep,
    auth: AdminDep,
) -> TimesheetPolicyResponse:
    """Create or replace the tenant's timesheet policy (admin only)."""
    return await policy_service.upsert_policy(session, auth, payload)


@router.delete("", status_code=204)
async def delete_policy(
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Remove the tenant's timesheet policy (admin only)."""
    await policy_service.delete_policy(session, auth)
