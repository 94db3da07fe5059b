"""
Query helpers for org-scoped tables.

Every read or write of a Client, Project or Task goes through one of these,
so the ``org_id`` filter is never left out. A row that exists in another org
is treated exactly like a row that does not exist.
"""

from __future__ import annotations

import uuid
from typing import Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFoundError
from app.models.base import OrgScopedMixin

M = TypeVar("M", bound=OrgScopedMixin)


def in_org(model: type[M], org_id: uuid.UUID):
    return model.org_id == org_id


def in_org_and_id(model: type[M], org_id: uuid.UUID, entity_id: uuid.UUID):
    return (model.org_id == org_id) & (model.id == entity_id)


def select_in_org(model: type[M], org_id: uuid.UUID):
    return select(model).where(in_org(model, org_id))


async def get_in_org(
    session: AsyncSession, model: type[M], org_id: uuid.UUID, entity_id: uuid.UUID
) -> Optional[M]:
    result = await session.execute(
        select(model).where(in_org_and_id(model, org_id, entity_id))
    )
    return result.scalar_one_or_none()


async def get_in_org_or_404(
    session: AsyncSession,
    model: type[M],
    org_id: uuid.UUID,
    entity_id: uuid.UUID,
    label: str,
) -> M:
    entity = await get_in_org(session, model, org_id, entity_id)
    if entity is None:
        raise NotFoundError(f"{label} not found.")
    return entity


async def name_taken(
    session: AsyncSession,
    model: type[M],
    org_id: uuid.UUID,
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    """True if another row in the same org already uses ``name``."""
    stmt = select(func.count()).select_from(model).where(
        in_org(model, org_id), model.name == name
    )
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    result = await session.execute(stmt)
    return result.scalar_one() > 0


async def count_and_page(session: AsyncSession, stmt, page: int, page_size: int):
    """Run ``stmt`` for one page. Returns (rows, total_count)."""
    total = (
        await session.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
    ).scalar_one()
    result = await session.execute(stmt.offset((page - 1) * page_size).limit(page_size))
    return list(result.scalars().all()), total
