"""Project model."""

import secrets
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import OrgScopedMixin, TimestampMixin, UUIDMixin

ROW_VERSION_BYTES = 8


def new_row_version() -> bytes:
    return secrets.token_bytes(ROW_VERSION_BYTES)


class Project(UUIDMixin, OrgScopedMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("org_id", "name", name="uq_projects_org_name"),)

    name: str = Field(nullable=False, max_length=200)
    client_id: Optional[uuid.UUID] = Field(default=None, foreign_key="clients.id", index=True)
    status: str = Field(default="active", nullable=False)  # active | on_hold | completed | archived
    created_by_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    # Replaced on every write; compared on update for optimistic concurrency
    row_version: bytes = Field(
        default_factory=new_row_version,
        nullable=False,
        sa_type=sa.LargeBinary,
    )
