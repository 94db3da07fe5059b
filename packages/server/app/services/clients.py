"""
Client service: org-scoped CRUD. Names are unique within an org.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StateConflictError
from app.core.gate import OrgContext
from app.core.scoping import (
    count_and_page,
    get_in_org_or_404,
    name_taken,
    select_in_org,
)
from app.models.client import Client
from app.models.project import Project, new_row_version
from app.services.invariants import (
    optional_email,
    optional_phone,
    require_text,
    unique_guard,
)
from workops_shared.schemas.clients import ClientCreate, ClientUpdate

log = structlog.get_logger()

DUPLICATE_NAME = "A client with this name already exists in this organization."


async def get_client_or_404(
    session: AsyncSession, client_id: uuid.UUID, org_id: uuid.UUID
) -> Client:
    return await get_in_org_or_404(session, Client, org_id, client_id, "Client")


async def list_clients(
    ctx: OrgContext,
    session: AsyncSession,
    *,
    page: int,
    page_size: int,
    q: Optional[str] = None,
) -> tuple[list[Client], int]:
    stmt = select_in_org(Client, ctx.org_id)
    if q and q.strip():
        stmt = stmt.where(Client.name.icontains(q.strip(), autoescape=True))
    stmt = stmt.order_by(Client.created_at.desc(), Client.id)
    return await count_and_page(session, stmt, page, page_size)


async def create_client(
    ctx: OrgContext, req: ClientCreate, session: AsyncSession
) -> Client:
    name = require_text(req.name, "Name")
    if await name_taken(session, Client, ctx.org_id, name):
        raise StateConflictError(DUPLICATE_NAME)

    client = Client(
        org_id=ctx.org_id,
        name=name,
        email=optional_email(req.email),
        phone=optional_phone(req.phone),
    )
    async with unique_guard(session, DUPLICATE_NAME):
        session.add(client)

    log.info("client.created", org_id=str(ctx.org_id), client_id=str(client.id))
    return client


async def update_client(
    ctx: OrgContext,
    client_id: uuid.UUID,
    req: ClientUpdate,
    session: AsyncSession,
) -> Client:
    client = await get_client_or_404(session, client_id, ctx.org_id)
    name = require_text(req.name, "Name")
    email = optional_email(req.email)
    phone = optional_phone(req.phone)
    if await name_taken(session, Client, ctx.org_id, name, exclude_id=client.id):
        raise StateConflictError(DUPLICATE_NAME)

    async with unique_guard(session, DUPLICATE_NAME):
        client.name = name
        client.email = email
        client.phone = phone
        session.add(client)

    log.info("client.updated", org_id=str(ctx.org_id), client_id=str(client.id))
    return client


async def delete_client(
    ctx: OrgContext, client_id: uuid.UUID, session: AsyncSession
) -> None:
    client = await get_client_or_404(session, client_id, ctx.org_id)

    # Projects keep existing without a client; their version moves on
    result = await session.execute(
        update(Project)
        .where(Project.org_id == ctx.org_id, Project.client_id == client.id)
        .values(client_id=None, row_version=new_row_version())
        .execution_options(synchronize_session=False)
    )
    await session.delete(client)
    await session.flush()
    log.info(
        "client.deleted",
        org_id=str(ctx.org_id),
        client_id=str(client_id),
        projects_detached=result.rowcount,
    )
