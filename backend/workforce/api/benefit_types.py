# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from workforce.api.deps import AdminDep, AuthDep, validate_tenant_scope
from workforce.db import SessionDep
from workforce.schemas.benefit_type import (
    BenefitTypeListResponse,
    BenefitTypeResponse,
    CreateBenefitTypePayload,
    UpdateBenefitTypePayload,
)
from workforce.services import benefit_type as benefit_type_service

benefit_types_router = APIRouter(
    prefix="/tenants/{tenant_id}/benefit-types",
    tags=["benefit-types"],
    dependencies=[Depends(validate_tenant_scope)],
)


@benefit_types_router.get("", response_model=BenefitTypeListResponse)
async def list_benefit_types(
    session: SessionDep,
    auth: AuthDep,
) -> BenefitTypeListResponse:
    """List the tenant's benefit types."""
    return await benefit_type_service.list_benefit_types(session, auth.tenant_id)


@benefit_types_router.post("", response_model=BenefitTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_benefit_type(
    payload: CreateBenefitTypePayload,
    session: SessionDep,
    auth: AdminDep,
) -> BenefitTypeResponse:
    """Define a new benefit type (admin only)."""
    return await benefit_type_service.create_benefit_type(session, auth, payload)


@benefit_types_router.get("/{benefit_type_id}", response_model=BenefitTypeResponse)
async def get_benefit_type(
    benefit_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BenefitTypeResponse:
    """Get a single benefit type."""
    return await benefit_type_service.get_benefit_type_detail(session, auth.tenant_id, benefit_type_id)


@benefit_types_router.patch("/{benefit_type_id}", response_model=BenefitTypeResponse)
async def update_benefit_type(
    benefit_type_id: uuid.UUID,
    payload: UpdateBenefitTypePayload,
    session: SessionDep,
    auth: AdminDep,
) -> BenefitTypeResponse:
    """Change a benefit type's settings (admin only)."""
    return await benefit_type_service.update_benefit_type(session, auth, benefit_type_id, payload)


@benefit_types_router.delete("/{benefit_type_id}", status_code=204)
async def delete_benefit_type(
    benefit_type_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Delete an unused benefit type (admin only)."""
    await benefit_type_service.delete_benefit_type(session, auth, benefit_type_id)
