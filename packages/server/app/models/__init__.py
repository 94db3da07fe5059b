# SQLModel definitions: imported here to ensure metadata is populated for create_all.
from .base import UUIDMixin, TimestampMixin, OrgScopedMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .membership import OrgMembership  # noqa: F401
from .client import Client  # noqa: F401
from .project import Project  # noqa: F401
from .task import Task  # noqa: F401
