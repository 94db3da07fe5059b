"""
Organization and membership schemas shared between the server and API clients.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import OrgRole


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., description="Organization display name")


class OrgUpdateRequest(BaseModel):
    name: str


class MemberAddRequest(BaseModel):
    email: str = Field(..., description="Email of an already registered user")
    role: OrgRole = OrgRole.MEMBER


class MemberRoleUpdateRequest(BaseModel):
    role: OrgRole


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgListItem(BaseModel):
    id: uuid.UUID
    name: str
    role: OrgRole  # the requesting user's role in this org
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgListResponse(BaseModel):
    data: list[OrgListItem]


class MemberResponse(BaseModel):
    user_id: uuid.UUID
    email: Optional[str] = None
    role: OrgRole
    joined_at: datetime


class MemberListResponse(BaseModel):
    data: list[MemberResponse]
