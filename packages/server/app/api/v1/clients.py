"""
Client endpoints: reads for any member, writes for managers and admins.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.gate import OrgContext, require_manager, require_member
from app.services import clients as client_service
from workops_shared.schemas.clients import ClientCreate, ClientRead, ClientUpdate
from workops_shared.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    ListResponse,
    build_list_response,
    clamp_pagination,
)

router = APIRouter()


@router.get("", response_model=ListResponse[ClientRead])
async def list_clients(
    page: int = Query(1, le=MAX_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_PAGE),
    q: Optional[str] = None,
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List clients, newest first, optionally filtered by name."""
    page, page_size = clamp_pagination(page, page_size)
    rows, total = await client_service.list_clients(
        ctx, session, page=page, page_size=page_size, q=q
    )
    return build_list_response(ClientRead, rows, total, page, page_size)


@router.post("", response_model=ClientRead, status_code=201)
async def create_client(
    client_in: ClientCreate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    return await client_service.create_client(ctx, client_in, session)


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await client_service.get_client_or_404(session, client_id, ctx.org_id)


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: uuid.UUID,
    client_in: ClientUpdate,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    return await client_service.update_client(ctx, client_id, client_in, session)


@router.delete("/{client_id}", status_code=204)
async def delete_client(
    client_id: uuid.UUID,
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    """Delete a client. Its projects stay, without a client."""
    await client_service.delete_client(ctx, client_id, session)
    return Response(status_code=204)
