"""Domain entity describing a community event."""

from dataclasses import dataclass
from datetime import datetime

from .group import GROUP_VISIBILITY_PUBLIC


@dataclass
class Event:
    """Read-only view of an event, optionally hosted by a group."""

    id: int
    tenant_id: str
    slug: str
    name: str
    visibility: str
    group_id: int | None = None
    created_by: int | None = None
    created_at: datetime | None = None

    def is_public(self) -> bool:
        return (self.visibility or "").lower() == GROUP_VISIBILITY_PUBLIC
