"""
Task endpoints, nested under a project: /orgs/{org_id}/projects/{project_id}/tasks
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.gate import OrgContext, require_manager, require_member
from app.services import tasks as task_service
from workops_shared.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    ListResponse,
    TaskStatus,
    build_list_response,
    clamp_pagination,
)
from workops_shared.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

router = APIRouter()


@router.get("", response_model=ListResponse[TaskRead])
async def list_tasks(
    project_id: uuid.UUID,
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[uuid.UUID] = None,
    page: int = Query(1, le=MAX_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_PAGE),
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List a project's tasks, most recently updated first."""
    page, page_size = clamp_pagination(page, page_size)
    rows, total = await task_service.list_tasks(
        ctx,
        project_id,
        session,
        page=page,
        page_size=page_size,
        status=status,
        assignee_id=assignee_id,
    )
    return build_list_response(TaskRead, rows, total, page, page_size)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    project_id: uuid.UUID,
    task_in: TaskCreate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    return await task_service.create_task(ctx, project_id, task_in, session)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await task_service.get_task_or_404(session, task_id, project_id, ctx.org_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    return await task_service.update_task(ctx, project_id, task_id, task_in, session)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    await task_service.delete_task(ctx, project_id, task_id, session)
    return Response(status_code=204)
