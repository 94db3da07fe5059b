from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel

from .common import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_user_id: Optional[UUID] = None
    due_date: Optional[datetime] = None


class TaskCreate(TaskBase):
    """New tasks always start as todo; a status in the payload is ignored."""


class TaskUpdate(TaskBase):
    status: TaskStatus = TaskStatus.TODO


class TaskRead(TaskBase):
    status: TaskStatus
    id: UUID
    org_id: UUID
    project_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
