"""
Access decisions for organization-scoped data.

``OrgAccessService`` answers two questions against the membership table:
is this user a member of the org, and does their role satisfy a
``RoleRequirement``. Both are plain reads on the request's session, so a
membership written earlier in the same request is visible.

A missing org and a missing membership look the same from here.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.membership import OrgMembership
from workops_shared.schemas.common import ROLE_ORDER, OrgRole, role_rank

IdLike = Union[uuid.UUID, str, None]


@dataclass(frozen=True)
class RoleRequirement:
    """A predicate over roles.

    Either a minimum role (``at_least``), satisfied by that role and every
    role ranked above it, or an explicit allow-set (``one_of``).
    """

    minimum: Optional[OrgRole] = None
    allowed: Optional[frozenset[OrgRole]] = None

    @classmethod
    def at_least(cls, role: OrgRole) -> "RoleRequirement":
        return cls(minimum=OrgRole(role))

    @classmethod
    def one_of(cls, *roles: OrgRole) -> "RoleRequirement":
        if not roles:
            raise ValueError("one_of() needs at least one role")
        return cls(allowed=frozenset(OrgRole(r) for r in roles))

    def allowed_roles(self) -> frozenset[OrgRole]:
        if self.allowed is not None:
            return self.allowed
        if self.minimum is None:
            return frozenset(ROLE_ORDER)
        limit = role_rank(self.minimum)
        return frozenset(r for r in ROLE_ORDER if role_rank(r) <= limit)

    def is_satisfied_by(self, role: Union[OrgRole, str, None]) -> bool:
        if role is None:
            return False
        try:
            role = OrgRole(role)
        except ValueError:
            return False
        return role in self.allowed_roles()

    def describe(self) -> str:
        if self.allowed is not None:
            return "one of " + ", ".join(sorted(r.value for r in self.allowed))
        if self.minimum is None:
            return "any member"
        return f"at least {self.minimum.value}"


MANAGER_OR_ABOVE = RoleRequirement.at_least(OrgRole.MANAGER)
ADMIN_ONLY = RoleRequirement.at_least(OrgRole.ADMIN)


def coerce_id(value: IdLike) -> Optional[uuid.UUID]:
    """Turn an id from any caller into a UUID, or None if it is not one."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return uuid.UUID(text)
    except ValueError:
        return None


class OrgAccessService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_role(self, org_id: IdLike, user_id: IdLike) -> Optional[OrgRole]:
        """The user's role in the org, or None when there is no membership."""
        org_uuid = coerce_id(org_id)
        user_uuid = coerce_id(user_id)
        if org_uuid is None or user_uuid is None:
            return None
        result = await self.session.execute(
            select(OrgMembership.role).where(
                OrgMembership.org_id == org_uuid,
                OrgMembership.user_id == user_uuid,
            )
        )
        role = result.scalar_one_or_none()
        if role is None:
            return None
        try:
            return OrgRole(role)
        except ValueError:
            return None

    async def is_member(self, org_id: IdLike, user_id: IdLike) -> bool:
        return await self.get_role(org_id, user_id) is not None

    async def has_role(
        self,
        org_id: IdLike,
        user_id: IdLike,
        requirement: Optional[RoleRequirement] = None,
    ) -> bool:
        """True iff a membership exists and its role satisfies ``requirement``.

        Without a requirement this is the same as ``is_member``.
        """
        if requirement is None:
            return await self.is_member(org_id, user_id)
        org_uuid = coerce_id(org_id)
        user_uuid = coerce_id(user_id)
        if org_uuid is None or user_uuid is None:
            return False
        allowed = [r.value for r in requirement.allowed_roles()]
        result = await self.session.execute(
            select(OrgMembership.user_id).where(
                OrgMembership.org_id == org_uuid,
                OrgMembership.user_id == user_uuid,
                OrgMembership.role.in_(allowed),
            )
        )
        return result.first() is not None
