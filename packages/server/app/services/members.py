"""
Membership service: who belongs to an org and with which role.

Every org keeps at least one admin: removing or demoting the last one is a
state conflict.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFoundError, StateConflictError, ValidationFailure
from app.core.gate import OrgContext
from app.models.membership import OrgMembership
from app.models.task import Task
from app.models.user import User
from app.services.invariants import optional_email, unique_guard
from app.services.users import get_user_by_email
from workops_shared.schemas.common import OrgRole
from workops_shared.schemas.organizations import MemberAddRequest, MemberRoleUpdateRequest

log = structlog.get_logger()

ALREADY_MEMBER = "User is already a member of this organization."


def _member_dict(membership: OrgMembership, email: str | None) -> dict:
    return {
        "user_id": membership.user_id,
        "email": email,
        "role": membership.role,
        "joined_at": membership.joined_at,
    }


async def _find_membership(
    session: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
) -> OrgMembership | None:
    result = await session.execute(
        select(OrgMembership).where(
            OrgMembership.org_id == org_id, OrgMembership.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def _get_membership_or_404(
    session: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
) -> OrgMembership:
    membership = await _find_membership(session, org_id, user_id)
    if not membership:
        raise NotFoundError("Membership not found.")
    return membership


async def _admin_ids(session: AsyncSession, org_id: uuid.UUID) -> list[uuid.UUID]:
    # Row locks on PostgreSQL serialize concurrent last-admin checks
    result = await session.execute(
        select(OrgMembership.user_id)
        .where(
            OrgMembership.org_id == org_id,
            OrgMembership.role == OrgRole.ADMIN.value,
        )
        .with_for_update()
    )
    return [row[0] for row in result.all()]


async def list_members(ctx: OrgContext, session: AsyncSession) -> list[dict]:
    """List members of the org in the order they joined."""
    result = await session.execute(
        select(OrgMembership, User.email)
        .join(User, User.id == OrgMembership.user_id)
        .where(OrgMembership.org_id == ctx.org_id)
        .order_by(OrgMembership.joined_at, OrgMembership.user_id)
    )
    return [_member_dict(membership, email) for membership, email in result.all()]


async def add_member(
    ctx: OrgContext,
    req: MemberAddRequest,
    session: AsyncSession,
) -> dict:
    """Add an already registered user to the org."""
    email = optional_email(req.email)
    if email is None:
        raise ValidationFailure("Email is required.")

    user = await get_user_by_email(email, session)
    if not user:
        raise ValidationFailure("User not found.")

    if await _find_membership(session, ctx.org_id, user.id):
        raise StateConflictError(ALREADY_MEMBER)

    membership = OrgMembership(
        org_id=ctx.org_id,
        user_id=user.id,
        role=req.role.value,
    )
    async with unique_guard(session, ALREADY_MEMBER):
        session.add(membership)

    log.info(
        "member.added",
        org_id=str(ctx.org_id),
        user_id=str(user.id),
        role=req.role.value,
        by=str(ctx.user_id),
    )
    return _member_dict(membership, user.email)


async def change_role(
    ctx: OrgContext,
    user_id: uuid.UUID,
    req: MemberRoleUpdateRequest,
    session: AsyncSession,
) -> dict:
    membership = await _get_membership_or_404(session, ctx.org_id, user_id)

    if membership.role == OrgRole.ADMIN.value and req.role != OrgRole.ADMIN:
        admins = await _admin_ids(session, ctx.org_id)
        if len(admins) <= 1:
            raise StateConflictError("Cannot demote the last admin.")

    old_role = membership.role
    membership.role = req.role.value
    session.add(membership)
    await session.flush()

    user = await session.get(User, user_id)
    log.info(
        "member.role_changed",
        org_id=str(ctx.org_id),
        user_id=str(user_id),
        from_role=old_role,
        to_role=req.role.value,
    )
    return _member_dict(membership, user.email if user else None)


async def remove_member(
    ctx: OrgContext, user_id: uuid.UUID, session: AsyncSession
) -> None:
    """Remove a user from the org. Access ends with this transaction."""
    membership = await _get_membership_or_404(session, ctx.org_id, user_id)

    if membership.role == OrgRole.ADMIN.value:
        admins = await _admin_ids(session, ctx.org_id)
        if len(admins) <= 1:
            raise StateConflictError("Cannot remove the last admin.")

    # Tasks in this org must not point at a non-member
    await session.execute(
        update(Task)
        .where(Task.org_id == ctx.org_id, Task.assignee_user_id == user_id)
        .values(assignee_user_id=None)
        .execution_options(synchronize_session=False)
    )
    await session.delete(membership)
    await session.flush()
    log.info("member.removed", org_id=str(ctx.org_id), user_id=str(user_id), by=str(ctx.user_id))
