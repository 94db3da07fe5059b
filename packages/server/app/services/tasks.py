"""
Task service: tasks live under a project in the same org.

A project id from another org is reported exactly like a missing project.
Assignees must be members of the org.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import OrgAccessService
from app.core.errors import NotFoundError, ValidationFailure
from app.core.gate import OrgContext
from app.core.scoping import count_and_page, get_in_org, select_in_org
from app.models.task import Task
from app.services.invariants import optional_text, require_future, require_text, as_utc
from app.services.projects import get_project_or_404
from workops_shared.schemas.common import DESCRIPTION_MAX_LENGTH, TaskStatus
from workops_shared.schemas.tasks import TaskCreate, TaskUpdate

log = structlog.get_logger()


async def get_task_or_404(
    session: AsyncSession,
    task_id: uuid.UUID,
    project_id: uuid.UUID,
    org_id: uuid.UUID,
) -> Task:
    await get_project_or_404(session, project_id, org_id)
    task = await get_in_org(session, Task, org_id, task_id)
    if not task or task.project_id != project_id:
        raise NotFoundError("Task not found.")
    return task


async def _check_assignee(
    session: AsyncSession, org_id: uuid.UUID, assignee_id: Optional[uuid.UUID]
) -> None:
    if assignee_id is None:
        return
    if not await OrgAccessService(session).is_member(org_id, assignee_id):
        raise ValidationFailure("Assignee must be a member of this organization.")


async def list_tasks(
    ctx: OrgContext,
    project_id: uuid.UUID,
    session: AsyncSession,
    *,
    page: int,
    page_size: int,
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[uuid.UUID] = None,
) -> tuple[list[Task], int]:
    await get_project_or_404(session, project_id, ctx.org_id)
    stmt = select_in_org(Task, ctx.org_id).where(Task.project_id == project_id)
    if status:
        stmt = stmt.where(Task.status == status.value)
    if assignee_id:
        stmt = stmt.where(Task.assignee_user_id == assignee_id)
    stmt = stmt.order_by(Task.updated_at.desc(), Task.id)
    return await count_and_page(session, stmt, page, page_size)


async def create_task(
    ctx: OrgContext,
    project_id: uuid.UUID,
    req: TaskCreate,
    session: AsyncSession,
) -> Task:
    project = await get_project_or_404(session, project_id, ctx.org_id)
    title = require_text(req.title, "Title")
    description = optional_text(req.description, "Description", DESCRIPTION_MAX_LENGTH)
    due_date = require_future(req.due_date, "Due date")
    await _check_assignee(session, ctx.org_id, req.assignee_user_id)

    task = Task(
        org_id=ctx.org_id,
        project_id=project.id,
        title=title,
        description=description,
        status=TaskStatus.TODO.value,
        priority=req.priority.value,
        assignee_user_id=req.assignee_user_id,
        due_date=due_date,
    )
    session.add(task)
    await session.flush()

    log.info(
        "task.created",
        org_id=str(ctx.org_id),
        project_id=str(project.id),
        task_id=str(task.id),
    )
    return task


async def update_task(
    ctx: OrgContext,
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    req: TaskUpdate,
    session: AsyncSession,
) -> Task:
    task = await get_task_or_404(session, task_id, project_id, ctx.org_id)
    title = require_text(req.title, "Title")
    description = optional_text(req.description, "Description", DESCRIPTION_MAX_LENGTH)
    await _check_assignee(session, ctx.org_id, req.assignee_user_id)

    task.title = title
    task.description = description
    task.status = req.status.value
    task.priority = req.priority.value
    task.assignee_user_id = req.assignee_user_id
    # Only creation requires a future due date
    task.due_date = as_utc(req.due_date) if req.due_date else None
    session.add(task)
    await session.flush()

    log.info("task.updated", org_id=str(ctx.org_id), task_id=str(task.id), status=task.status)
    return task


async def delete_task(
    ctx: OrgContext,
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    session: AsyncSession,
) -> None:
    task = await get_task_or_404(session, task_id, project_id, ctx.org_id)
    await session.delete(task)
    await session.flush()
    log.info("task.deleted", org_id=str(ctx.org_id), task_id=str(task_id))
