"""
Membership endpoints: list (manager), add / change role / remove (admin).
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.gate import OrgContext, require_admin, require_manager
from app.services import members as member_service
from workops_shared.schemas.organizations import (
    MemberAddRequest,
    MemberListResponse,
    MemberResponse,
    MemberRoleUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members(
    ctx: OrgContext = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    items = await member_service.list_members(ctx, session)
    return MemberListResponse(data=items)


@router.post("", response_model=MemberResponse, status_code=201)
async def add_member(
    body: MemberAddRequest,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Add a registered user to the org by email."""
    return await member_service.add_member(ctx, body, session)


@router.patch("/{user_id}", response_model=MemberResponse)
async def change_member_role(
    user_id: uuid.UUID,
    body: MemberRoleUpdateRequest,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await member_service.change_role(ctx, user_id, body, session)


@router.delete("/{user_id}", status_code=204)
async def remove_member(
    user_id: uuid.UUID,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Remove a member. The last admin cannot be removed."""
    await member_service.remove_member(ctx, user_id, session)
    return Response(status_code=204)
