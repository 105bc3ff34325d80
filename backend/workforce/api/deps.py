# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path

from workforce.config import get_settings
from workforce.exceptions import ForbiddenError
from workforce.models.enums import Role
from workforce.schemas.auth import AuthContext


async def get_auth_context(
    x_tenant_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract the caller identity from request headers set by the auth gateway."""
    return AuthContext(tenant_id=x_tenant_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if auth.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def require_reviewer(
    auth: AuthDep,
) -> AuthContext:
    """Require a manager or admin role for review actions."""
    if auth.role not in (Role.MANAGER, Role.ADMIN):
        raise ForbiddenError("Manager or admin access required")
    return auth


ReviewerDep = Annotated[AuthContext, Depends(require_reviewer)]


async def validate_tenant_scope(
    tenant_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path tenant_id matches the auth header tenant_id."""
    if tenant_id != auth.tenant_id:
        raise ForbiddenError("Tenant ID mismatch")
    return auth


def resolve_page_size(page_size: int | None) -> int:
    """Apply the configured default and cap to a requested page size."""
    settings = get_settings()
    return min(page_size or settings.default_page_size, settings.max_page_size)
