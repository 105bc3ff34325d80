# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from workforce.exceptions import ForbiddenError
from workforce.models.profile import Profile

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce.schemas.auth import AuthContext


async def direct_reports(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    manager_user_id: uuid.UUID,
) -> set[uuid.UUID]:
    """Return the user ids whose profile names ``manager_user_id`` as manager."""
    result = await session.execute(
        select(col(Profile.user_id)).where(
            col(Profile.tenant_id) == tenant_id,
            col(Profile.manager_user_id) == manager_user_id,
        )
    )
    return set(result.scalars().all())


async def verify_manager_of(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    manager_user_id: uuid.UUID,
    target_user_id: uuid.UUID,
) -> None:
    """Raise 403 unless ``target_user_id`` reports directly to ``manager_user_id``."""
    result = await session.execute(
        select(col(Profile.id)).where(
            col(Profile.tenant_id) == tenant_id,
            col(Profile.user_id) == target_user_id,
            col(Profile.manager_user_id) == manager_user_id,
        )
    )
    if result.scalar_one_or_none() is None:
        raise ForbiddenError("You are not the manager of this user")


async def authorize_user_access(
    session: AsyncSession,
    auth: AuthContext,
    target_user_id: uuid.UUID,
) -> None:
    """Allow the user themselves, tenant admins, and the user's direct manager."""
    if target_user_id == auth.user_id or auth.is_admin:
        return
    await verify_manager_of(session, auth.tenant_id, auth.user_id, target_user_id)
