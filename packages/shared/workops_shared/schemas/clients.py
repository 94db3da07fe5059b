from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel


class ClientBase(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(ClientBase):
    pass


class ClientRead(ClientBase):
    id: UUID
    org_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
