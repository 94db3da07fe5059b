"""
Project service: org-scoped CRUD with optimistic concurrency.

Each project carries a ``row_version`` token that is replaced on every write.
An update must present the token it last read; the write itself is a single
compare-and-set UPDATE, so of two concurrent writers holding the same token
only the first succeeds.

Status changes are unrestricted: any status may follow any other.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StateConflictError, ValidationFailure, VersionConflictError
from app.core.gate import OrgContext
from app.core.scoping import (
    count_and_page,
    get_in_org,
    get_in_org_or_404,
    name_taken,
    select_in_org,
)
from app.models.base import utcnow
from app.models.client import Client
from app.models.project import Project, new_row_version
from app.models.task import Task
from app.services.invariants import parse_row_version, require_text, unique_guard
from workops_shared.schemas.common import ProjectStatus
from workops_shared.schemas.projects import ProjectCreate, ProjectUpdate

log = structlog.get_logger()

DUPLICATE_NAME = "A project with this name already exists in this organization."
FOREIGN_CLIENT = "Client not found or does not belong to this organization."


async def get_project_or_404(
    session: AsyncSession, project_id: uuid.UUID, org_id: uuid.UUID
) -> Project:
    return await get_in_org_or_404(session, Project, org_id, project_id, "Project")


async def _check_client(
    session: AsyncSession, org_id: uuid.UUID, client_id: Optional[uuid.UUID]
) -> None:
    if client_id is None:
        return
    if await get_in_org(session, Client, org_id, client_id) is None:
        raise ValidationFailure(FOREIGN_CLIENT)


async def list_projects(
    ctx: OrgContext,
    session: AsyncSession,
    *,
    page: int,
    page_size: int,
    status: Optional[ProjectStatus] = None,
    client_id: Optional[uuid.UUID] = None,
    q: Optional[str] = None,
) -> tuple[list[Project], int]:
    stmt = select_in_org(Project, ctx.org_id)
    if status:
        stmt = stmt.where(Project.status == status.value)
    if client_id:
        stmt = stmt.where(Project.client_id == client_id)
    if q and q.strip():
        stmt = stmt.where(Project.name.icontains(q.strip(), autoescape=True))
    stmt = stmt.order_by(Project.created_at.desc(), Project.id)
    return await count_and_page(session, stmt, page, page_size)


async def create_project(
    ctx: OrgContext, req: ProjectCreate, session: AsyncSession
) -> Project:
    name = require_text(req.name, "Name")
    await _check_client(session, ctx.org_id, req.client_id)
    if await name_taken(session, Project, ctx.org_id, name):
        raise StateConflictError(DUPLICATE_NAME)

    project = Project(
        org_id=ctx.org_id,
        name=name,
        client_id=req.client_id,
        status=req.status.value,
        created_by_user_id=ctx.user_id,
    )
    async with unique_guard(session, DUPLICATE_NAME):
        session.add(project)

    log.info("project.created", org_id=str(ctx.org_id), project_id=str(project.id))
    return project


async def update_project(
    ctx: OrgContext,
    project_id: uuid.UUID,
    req: ProjectUpdate,
    session: AsyncSession,
) -> Project:
    """Replace a project's fields if the caller's version token is current.

    Raises ``VersionConflictError`` before touching any field when the token
    is stale; nothing is written in that case.
    """
    expected = parse_row_version(req.row_version)
    project = await get_project_or_404(session, project_id, ctx.org_id)

    if project.row_version != expected:
        log.info("project.version_conflict", org_id=str(ctx.org_id), project_id=str(project_id))
        raise VersionConflictError()

    name = require_text(req.name, "Name")
    await _check_client(session, ctx.org_id, req.client_id)
    if await name_taken(session, Project, ctx.org_id, name, exclude_id=project.id):
        raise StateConflictError(DUPLICATE_NAME)

    async with unique_guard(session, DUPLICATE_NAME):
        result = await session.execute(
            update(Project)
            .where(
                Project.org_id == ctx.org_id,
                Project.id == project.id,
                Project.row_version == expected,
            )
            .values(
                name=name,
                client_id=req.client_id,
                status=req.status.value,
                updated_at=utcnow(),
                row_version=new_row_version(),
            )
            .execution_options(synchronize_session=False)
        )
    if result.rowcount != 1:
        # Another writer committed between our read and our write
        log.info("project.version_conflict", org_id=str(ctx.org_id), project_id=str(project_id))
        raise VersionConflictError()

    await session.refresh(project)
    log.info("project.updated", org_id=str(ctx.org_id), project_id=str(project.id))
    return project


async def delete_project(
    ctx: OrgContext, project_id: uuid.UUID, session: AsyncSession
) -> None:
    project = await get_project_or_404(session, project_id, ctx.org_id)
    await session.execute(
        delete(Task)
        .where(Task.org_id == ctx.org_id, Task.project_id == project.id)
        .execution_options(synchronize_session=False)
    )
    await session.delete(project)
    await session.flush()
    log.info("project.deleted", org_id=str(ctx.org_id), project_id=str(project_id))
