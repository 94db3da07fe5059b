import base64
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, field_validator

from .common import ProjectStatus


class ProjectBase(BaseModel):
    name: str
    client_id: Optional[UUID] = None
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(ProjectBase):
    # Base64 token from the last read; required, checked by the service
    row_version: Optional[str] = None


class ProjectRead(ProjectBase):
    id: UUID
    org_id: UUID
    created_by_user_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
    row_version: str

    model_config = {"from_attributes": True}

    @field_validator("row_version", mode="before")
    @classmethod
    def _encode_row_version(cls, value):
        if isinstance(value, (bytes, bytearray, memoryview)):
            return encode_row_version(bytes(value))
        return value


def encode_row_version(token: bytes) -> str:
    return base64.b64encode(token).decode("ascii")


def decode_row_version(text: str) -> bytes:
    """Decode a base64 row version. Raises ValueError on malformed input."""
    return base64.b64decode(text.strip(), validate=True)
