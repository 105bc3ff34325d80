# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from workforce.models.enums import Role


class AuthContext(BaseModel):
    """Caller identity injected per request by upstream authentication."""

    tenant_id: uuid.UUID
    user_id: uuid.UUID
    role: Role = Role.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
