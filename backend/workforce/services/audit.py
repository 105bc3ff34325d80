from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from workforce.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from workforce.models.enums import AuditAction, AuditEntity

logger = logging.getLogger(__name__)


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Serialize a SQLModel instance to a JSON-safe dict for audit logging."""
    data: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        elif isinstance(value, Decimal):
            data[key] = str(value)
        else:
            data[key] = value
    return data


async def write_audit_log(
    session: AsyncSession,
    *,
    tenant_id: uuid.UUID,
    actor_user_id: uuid.UUID,
    entity: AuditEntity,
    action: AuditAction,
    entity_id: uuid.UUID | None = None,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog | None:
    """Record an audit event after the business change has committed.

    The entry is committed on its own. Any failure is rolled back and
    logged; it never reaches the caller, so the triggering operation stands.
    """
    try:
        entry = AuditLog(
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            entity=entity.value,
            entity_id=entity_id,
            action=action.value,
            before_json=before_json,
            after_json=after_json,
        )
        session.add(entry)
        await session.commit()
    except Exception:
        logger.exception(
            "Failed to write audit log: %s on %s %s by user %s",
            action.value,
            entity.value,
            entity_id,
            actor_user_id,
        )
        await session.rollback()
        return None
    logger.debug("Audit log written: %s on %s %s by user %s", action.value, entity.value, entity_id, actor_user_id)
    return entry
