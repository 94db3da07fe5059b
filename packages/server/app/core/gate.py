"""
Org-scope gate.

Every org-scoped route starts here. The gate resolves membership first and
only then looks at the role:

- not a member (or no such org)  -> ``NotMemberError``        (404)
- member, role too low           -> ``InsufficientRoleError`` (403)
- otherwise                      -> an ``OrgContext`` for the handler

``decide`` is the pure decision; ``enforce`` turns it into an exception or
a context; ``org_scope`` wraps ``enforce`` as a FastAPI dependency.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import (
    ADMIN_ONLY,
    MANAGER_OR_ABOVE,
    IdLike,
    OrgAccessService,
    RoleRequirement,
    coerce_id,
)
from app.core.auth import Identity, get_identity
from app.core.database import get_session
from app.core.errors import InsufficientRoleError, NotMemberError

log = structlog.get_logger()


class Decision(str, Enum):
    ALLOW = "allow"
    NOT_MEMBER = "not_member"
    INSUFFICIENT_ROLE = "insufficient_role"


@dataclass(frozen=True)
class OrgContext:
    """The resolved org and caller, passed explicitly into every service call."""

    org_id: uuid.UUID
    user_id: uuid.UUID


async def decide(
    access: OrgAccessService,
    org_id: IdLike,
    user_id: IdLike,
    requirement: Optional[RoleRequirement] = None,
) -> Decision:
    if not await access.is_member(org_id, user_id):
        return Decision.NOT_MEMBER
    if requirement is not None and not await access.has_role(org_id, user_id, requirement):
        return Decision.INSUFFICIENT_ROLE
    return Decision.ALLOW


async def enforce(
    access: OrgAccessService,
    org_id: IdLike,
    user_id: IdLike,
    requirement: Optional[RoleRequirement] = None,
) -> OrgContext:
    decision = await decide(access, org_id, user_id, requirement)
    if decision is Decision.NOT_MEMBER:
        log.info("gate.not_member", user_id=str(user_id))
        raise NotMemberError()
    if decision is Decision.INSUFFICIENT_ROLE:
        log.info(
            "gate.insufficient_role",
            org_id=str(org_id),
            user_id=str(user_id),
            required=requirement.describe() if requirement else None,
        )
        raise InsufficientRoleError()
    return OrgContext(org_id=coerce_id(org_id), user_id=coerce_id(user_id))


def org_scope(requirement: Optional[RoleRequirement] = None):
    """Build a dependency that gates a route on ``{org_id}`` in its path."""

    async def dependency(
        org_id: str,
        identity: Identity = Depends(get_identity),
        session: AsyncSession = Depends(get_session),
    ) -> OrgContext:
        return await enforce(OrgAccessService(session), org_id, identity.user_id, requirement)

    return dependency


require_member = org_scope()
require_manager = org_scope(MANAGER_OR_ABOVE)
require_admin = org_scope(ADMIN_ONLY)
