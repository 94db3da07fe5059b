"""
Organization service: org creation, listing and renaming.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotMemberError
from app.core.gate import OrgContext
from app.models.membership import OrgMembership
from app.models.organization import Organization
from app.services.invariants import require_text
from workops_shared.schemas.common import OrgRole
from workops_shared.schemas.organizations import OrgCreateRequest, OrgUpdateRequest

log = structlog.get_logger()


async def list_user_orgs(
    user_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """List all orgs a user belongs to, with their role, newest first."""
    result = await session.execute(
        select(Organization, OrgMembership.role)
        .join(OrgMembership, OrgMembership.org_id == Organization.id)
        .where(OrgMembership.user_id == user_id)
        .order_by(Organization.created_at.desc(), Organization.id)
    )
    return [
        {
            "id": org.id,
            "name": org.name,
            "role": role,
            "created_at": org.created_at,
        }
        for org, role in result.all()
    ]


async def create_org(
    req: OrgCreateRequest,
    creator_id: uuid.UUID,
    session: AsyncSession,
) -> Organization:
    """Create an org and make the creator its admin, in one transaction."""
    org = Organization(name=require_text(req.name, "Name"))
    session.add(org)
    await session.flush()

    membership = OrgMembership(
        user_id=creator_id,
        org_id=org.id,
        role=OrgRole.ADMIN.value,
    )
    session.add(membership)
    await session.flush()

    log.info("org.created", org_id=str(org.id), creator=str(creator_id))
    return org


async def get_org(ctx: OrgContext, session: AsyncSession) -> Organization:
    org = await session.get(Organization, ctx.org_id)
    if org is None:
        # Membership rows never outlive their org
        raise NotMemberError()
    return org


async def rename_org(
    ctx: OrgContext,
    req: OrgUpdateRequest,
    session: AsyncSession,
) -> Organization:
    org = await get_org(ctx, session)
    org.name = require_text(req.name, "Name")
    session.add(org)
    await session.flush()

    log.info("org.renamed", org_id=str(org.id), by=str(ctx.user_id))
    return org
