"""Task model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import OrgScopedMixin, TimestampMixin, UUIDMixin


class Task(UUIDMixin, OrgScopedMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    status: str = Field(nullable=False, default="todo")  # todo | in_progress | done
    priority: str = Field(nullable=False, default="medium")  # low | medium | high | urgent
    assignee_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
