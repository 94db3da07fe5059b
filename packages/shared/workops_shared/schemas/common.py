from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# Field limits shared by every org-scoped resource
NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 4000
EMAIL_MAX_LENGTH = 320
PHONE_MAX_LENGTH = 50

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Paging parameters are 32-bit on the wire
MAX_PAGE = 2**31 - 1


class OrgRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


# Highest privilege first; rank is the index
ROLE_ORDER: list["OrgRole"] = [
    OrgRole.ADMIN,
    OrgRole.MANAGER,
    OrgRole.MEMBER,
]


def role_rank(role: OrgRole) -> int:
    """Numeric rank of a role. Admin is 0; a smaller rank means more privilege."""
    return ROLE_ORDER.index(OrgRole(role))


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ListResponse(BaseModel, Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_count: int
    has_next: bool


class ProblemDetail(BaseModel):
    type: str = "about:blank"
    title: str
    status: int
    detail: Optional[str] = None
    code: Optional[str] = None


def build_list_response(
    schema: type[BaseModel], rows: list, total: int, page: int, page_size: int
) -> ListResponse:
    return ListResponse[schema](
        items=[schema.model_validate(row) for row in rows],
        page=page,
        page_size=page_size,
        total_count=total,
        has_next=page * page_size < total,
    )


def clamp_pagination(page: int, page_size: int) -> tuple[int, int]:
    """Normalize paging input. Out-of-range values are clamped, never rejected."""
    if page < 1:
        page = 1
    elif page > MAX_PAGE:
        page = MAX_PAGE
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    elif page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page, page_size
