"""Domain entities describing community groups."""

from dataclasses import dataclass
from datetime import datetime

GROUP_VISIBILITY_PUBLIC = "public"
GROUP_VISIBILITY_AUTHENTICATED = "authenticated"
GROUP_VISIBILITY_PRIVATE = "private"


@dataclass
class Group:
    """Read-only view of a group owned by the community CRUD layer."""

    id: int
    tenant_id: str
    slug: str
    name: str
    visibility: str
    created_by: int | None = None
    created_at: datetime | None = None

    def is_public(self) -> bool:
        return (self.visibility or "").lower() == GROUP_VISIBILITY_PUBLIC

    def is_private(self) -> bool:
        return (self.visibility or "").lower() == GROUP_VISIBILITY_PRIVATE


__all__ = [
    "Group",
    "GROUP_VISIBILITY_PUBLIC",
    "GROUP_VISIBILITY_AUTHENTICATED",
    "GROUP_VISIBILITY_PRIVATE",
]
