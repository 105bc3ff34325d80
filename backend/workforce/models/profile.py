# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from workforce.models.base import UUIDBase


class Profile(UUIDBase, table=True):
    """Employment profile; ``manager_user_id`` defines the reporting line."""

    __tablename__ = "profile"
    __table_args__ = (sa.UniqueConstraint("tenant_id", "user_id", name="uq_profile_tenant_user"),)

    tenant_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    manager_user_id: uuid.UUID | None = Field(default=None, index=True)
    job_title: str | None = Field(default=None, max_length=255)
