# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from workforce.api.deps import AuthDep, ReviewerDep, resolve_page_size, validate_tenant_scope
from workforce.db import SessionDep
from workforce.models.enums import LeaveRequestStatus
from workforce.schemas.leave_request import (
    CreateLeaveRequestPayload,
    LeaveDecisionPayload,
    LeaveRequestFilters,
    LeaveRequestListResponse,
    LeaveRequestResponse,
)
from workforce.services import leave_request as leave_request_service

leave_requests_router = APIRouter(
    prefix="/tenants/{tenant_id}/leave-requests",
    tags=["leave-requests"],
    dependencies=[Depends(validate_tenant_scope)],
)


@leave_requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """File a leave request against one of the caller's benefit balances."""
    return await leave_request_service.create_leave_request(session, auth, payload)


@leave_requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    mine: bool = Query(default=False),
    team: bool = Query(default=False),
    status_filter: LeaveRequestStatus | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
) -> LeaveRequestListResponse:
    """List leave requests overlapping an optional date range."""
    filters = LeaveRequestFilters(
        mine=mine,
        team=team,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=resolve_page_size(page_size),
    )
    return await leave_request_service.list_leave_requests(session, auth, filters)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await leave_request_service.get_leave_request(session, auth.tenant_id, request_id)


@leave_requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    payload: LeaveDecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and debit the balance (manager or admin)."""
    return await leave_request_service.approve_leave_request(session, auth, request_id, payload)


@leave_requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    payload: LeaveDecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Reject a pending request (manager or admin)."""
    return await leave_request_service.reject_leave_request(session, auth, request_id, payload)


@leave_requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Cancel the caller's own pending request."""
    return await leave_request_service.cancel_leave_request(session, auth, request_id)
