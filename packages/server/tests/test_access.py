"""
Tests for the access decision service and the role predicate.

Covers:
- Role ordering and RoleRequirement (minimum role and explicit allow-set)
- is_member: exact (org, user) pairs only; bad ids never raise
- has_role: hierarchy matrix against real membership rows
- Reads see the session's own pending writes
"""

from __future__ import annotations

import uuid

import pytest

from app.core.access import (
    ADMIN_ONLY,
    MANAGER_OR_ABOVE,
    OrgAccessService,
    RoleRequirement,
    coerce_id,
)
from app.models.membership import OrgMembership
from workops_shared.schemas.common import ROLE_ORDER, OrgRole, role_rank


# ---------------------------------------------------------------------------
# Unit tests: role ordering
# ---------------------------------------------------------------------------

class TestRoleOrdering:
    def test_admin_is_smallest(self):
        assert role_rank(OrgRole.ADMIN) == 0
        assert role_rank(OrgRole.ADMIN) < role_rank(OrgRole.MANAGER) < role_rank(OrgRole.MEMBER)

    def test_order_is_total(self):
        assert ROLE_ORDER == [OrgRole.ADMIN, OrgRole.MANAGER, OrgRole.MEMBER]

    def test_rank_accepts_raw_values(self):
        assert role_rank("manager") == 1


class TestRoleRequirement:
    @pytest.mark.parametrize("held", list(OrgRole))
    @pytest.mark.parametrize("required", list(OrgRole))
    def test_minimum_role_matrix(self, held, required):
        """A role satisfies 'at least R' exactly when it ranks at or above R."""
        expected = role_rank(held) <= role_rank(required)
        assert RoleRequirement.at_least(required).is_satisfied_by(held) is expected

    def test_admin_satisfies_everything(self):
        for role in OrgRole:
            assert RoleRequirement.at_least(role).is_satisfied_by(OrgRole.ADMIN)

    def test_member_only_satisfies_member(self):
        assert RoleRequirement.at_least(OrgRole.MEMBER).is_satisfied_by(OrgRole.MEMBER)
        assert not MANAGER_OR_ABOVE.is_satisfied_by(OrgRole.MEMBER)
        assert not ADMIN_ONLY.is_satisfied_by(OrgRole.MEMBER)

    def test_one_of_is_exact_set(self):
        req = RoleRequirement.one_of(OrgRole.ADMIN, OrgRole.MEMBER)
        assert req.is_satisfied_by(OrgRole.ADMIN)
        assert req.is_satisfied_by(OrgRole.MEMBER)
        assert not req.is_satisfied_by(OrgRole.MANAGER)

    def test_one_of_requires_roles(self):
        with pytest.raises(ValueError):
            RoleRequirement.one_of()

    def test_allowed_roles_expands_minimum(self):
        assert MANAGER_OR_ABOVE.allowed_roles() == frozenset({OrgRole.ADMIN, OrgRole.MANAGER})
        assert ADMIN_ONLY.allowed_roles() == frozenset({OrgRole.ADMIN})

    def test_unknown_or_missing_role(self):
        assert not MANAGER_OR_ABOVE.is_satisfied_by(None)
        assert not MANAGER_OR_ABOVE.is_satisfied_by("owner")

    def test_accepts_string_values(self):
        assert MANAGER_OR_ABOVE.is_satisfied_by("manager")

    def test_describe(self):
        assert MANAGER_OR_ABOVE.describe() == "at least manager"
        assert RoleRequirement.one_of(OrgRole.MEMBER).describe() == "one of member"


class TestCoerceId:
    def test_values(self):
        uid = uuid.uuid4()
        assert coerce_id(uid) == uid
        assert coerce_id(str(uid)) == uid
        assert coerce_id(f"  {uid}  ") == uid
        assert coerce_id(None) is None
        assert coerce_id("") is None
        assert coerce_id("   ") is None
        assert coerce_id("not-a-uuid") is None


# ---------------------------------------------------------------------------
# Integration tests: OrgAccessService against the database
# ---------------------------------------------------------------------------

async def test_is_member_exact_pair(session, make_user, make_org):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    org_a = await make_org("A", [(alice, "member")])
    org_b = await make_org("B", [(bob, "admin")])

    access = OrgAccessService(session)
    assert await access.is_member(org_a.id, alice.id)
    assert await access.is_member(org_b.id, bob.id)
    # Same users, other org
    assert not await access.is_member(org_b.id, alice.id)
    assert not await access.is_member(org_a.id, bob.id)


async def test_missing_org_is_just_not_a_member(session, make_user):
    alice = await make_user()
    access = OrgAccessService(session)
    assert not await access.is_member(uuid.uuid4(), alice.id)
    assert not await access.has_role(uuid.uuid4(), alice.id, ADMIN_ONLY)


@pytest.mark.parametrize("bad", [None, "", "   ", "garbage"])
async def test_bad_ids_return_false(session, make_user, make_org, bad):
    alice = await make_user()
    org = await make_org("A", [(alice, "admin")])
    access = OrgAccessService(session)
    assert await access.is_member(org.id, bad) is False
    assert await access.is_member(bad, alice.id) is False
    assert await access.has_role(org.id, bad, ADMIN_ONLY) is False
    assert await access.get_role(bad, alice.id) is None


async def test_has_role_hierarchy(session, make_user, make_org):
    admin = await make_user()
    manager = await make_user()
    member = await make_user()
    org = await make_org(
        "A", [(admin, "admin"), (manager, "manager"), (member, "member")]
    )
    access = OrgAccessService(session)

    assert await access.has_role(org.id, admin.id, ADMIN_ONLY)
    assert await access.has_role(org.id, admin.id, MANAGER_OR_ABOVE)
    assert await access.has_role(org.id, manager.id, MANAGER_OR_ABOVE)
    assert not await access.has_role(org.id, manager.id, ADMIN_ONLY)
    assert not await access.has_role(org.id, member.id, MANAGER_OR_ABOVE)
    assert await access.has_role(org.id, member.id, RoleRequirement.at_least(OrgRole.MEMBER))


async def test_has_role_explicit_set(session, make_user, make_org):
    manager = await make_user()
    org = await make_org("A", [(manager, "manager")])
    access = OrgAccessService(session)
    assert not await access.has_role(
        org.id, manager.id, RoleRequirement.one_of(OrgRole.ADMIN, OrgRole.MEMBER)
    )
    assert await access.has_role(org.id, manager.id, RoleRequirement.one_of(OrgRole.MANAGER))


async def test_has_role_without_requirement_is_membership(session, make_user, make_org):
    member = await make_user()
    outsider = await make_user()
    org = await make_org("A", [(member, "member")])
    access = OrgAccessService(session)
    assert await access.has_role(org.id, member.id)
    assert not await access.has_role(org.id, outsider.id)


async def test_get_role(session, make_user, make_org):
    manager = await make_user()
    org = await make_org("A", [(manager, "manager")])
    assert await OrgAccessService(session).get_role(org.id, manager.id) == OrgRole.MANAGER


async def test_reads_see_pending_writes(session, make_user, make_org):
    admin = await make_user()
    newcomer = await make_user()
    org = await make_org("A", [(admin, "admin")])
    access = OrgAccessService(session)
    assert not await access.is_member(org.id, newcomer.id)

    session.add(OrgMembership(org_id=org.id, user_id=newcomer.id, role="manager"))
    # No explicit flush or commit: the query autoflushes within the session
    assert await access.is_member(org.id, newcomer.id)
    assert await access.has_role(org.id, newcomer.id, MANAGER_OR_ABOVE)
