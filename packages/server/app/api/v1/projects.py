"""
Project endpoints: CRUD with optimistic concurrency.

- Reads are open to every member; writes need manager or admin
- Every response carries the current ``row_version`` (base64)
- PUT must echo the ``row_version`` it last read; a stale token is a 409
- Status may be set to any value at any time
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.gate import OrgContext, require_manager, require_member
from app.services import projects as project_service
from workops_shared.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    ListResponse,
    ProjectStatus,
    build_list_response,
    clamp_pagination,
)
from workops_shared.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate

router = APIRouter()


@router.get("", response_model=ListResponse[ProjectRead])
async def list_projects(
    status: Optional[ProjectStatus] = None,
    client_id: Optional[uuid.UUID] = None,
    q: Optional[str] = None,
    page: int = Query(1, le=MAX_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_PAGE),
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List projects for the org, optionally filtered by status, client or name."""
    page, page_size = clamp_pagination(page, page_size)
    rows, total = await project_service.list_projects(
        ctx,
        session,
        page=page,
        page_size=page_size,
        status=status,
        client_id=client_id,
        q=q,
    )
    return build_list_response(ProjectRead, rows, total, page, page_size)


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    project_in: ProjectCreate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.create_project(ctx, project_in, session)
    return ProjectRead.model_validate(project)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.get_project_or_404(session, project_id, ctx.org_id)
    return ProjectRead.model_validate(project)


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    project_in: ProjectUpdate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.update_project(ctx, project_id, project_in, session)
    return ProjectRead.model_validate(project)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: uuid.UUID,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    """Delete a project and its tasks."""
    await project_service.delete_project(ctx, project_id, session)
    return Response(status_code=204)
