"""Client model."""

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import OrgScopedMixin, TimestampMixin, UUIDMixin


class Client(UUIDMixin, OrgScopedMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("org_id", "name", name="uq_clients_org_name"),)

    name: str = Field(nullable=False, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=50)
