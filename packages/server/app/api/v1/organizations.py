"""
Organization API endpoints.

GET    /api/v1/orgs            - List orgs for the authenticated user
POST   /api/v1/orgs            - Create a new org (creator becomes admin)
GET    /api/v1/orgs/{org_id}   - Get org details (member)
PATCH  /api/v1/orgs/{org_id}   - Rename org (admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Identity, get_identity
from app.core.database import get_session
from app.core.gate import OrgContext, require_admin, require_member
from app.services import organizations as org_service
from workops_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListResponse,
    OrgResponse,
    OrgUpdateRequest,
)

# ---------------------------------------------------------------------------
# Non-org-scoped routes (no org_id in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("/orgs", response_model=OrgListResponse, tags=["Organizations"])
async def list_orgs(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to."""
    items = await org_service.list_user_orgs(identity.user_id, session)
    return OrgListResponse(data=items)


@router_global.post("/orgs", response_model=OrgResponse, status_code=201, tags=["Organizations"])
async def create_org(
    body: OrgCreateRequest,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes an admin."""
    org = await org_service.create_org(body, identity.user_id, session)
    return OrgResponse.model_validate(org)


# ---------------------------------------------------------------------------
# Org-scoped routes (org_id in path)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=OrgResponse, tags=["Organizations"])
async def get_org(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.get_org(ctx, session)
    return OrgResponse.model_validate(org)


@router_scoped.patch("", response_model=OrgResponse, tags=["Organizations"])
async def rename_org(
    body: OrgUpdateRequest,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Rename the org (Admin only)."""
    org = await org_service.rename_org(ctx, body, session)
    return OrgResponse.model_validate(org)
