"""Domain events consumed by the activity feed fan-out listener.

Each event is a closed, typed variant; the listener dispatches on the class
and refuses anything outside this set.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupCreated:
    tenant_id: str
    group_slug: str
    user_id: int


@dataclass(frozen=True)
class GroupUpdated:
    tenant_id: str
    group_slug: str
    user_id: int


@dataclass(frozen=True)
class GroupMemberAdded:
    tenant_id: str
    group_slug: str
    user_slug: str


@dataclass(frozen=True)
class GroupMilestoneReached:
    tenant_id: str
    group_slug: str
    milestone_type: str
    value: int


@dataclass(frozen=True)
class EventCreated:
    tenant_id: str
    event_slug: str
    user_id: int


@dataclass(frozen=True)
class EventUpdated:
    tenant_id: str
    event_slug: str
    user_id: int


@dataclass(frozen=True)
class EventRsvpAdded:
    tenant_id: str
    event_slug: str
    user_id: int


DomainEvent = (
    GroupCreated
    | GroupUpdated
    | GroupMemberAdded
    | GroupMilestoneReached
    | EventCreated
    | EventUpdated
    | EventRsvpAdded
)


__all__ = [
    "DomainEvent",
    "EventCreated",
    "EventRsvpAdded",
    "EventUpdated",
    "GroupCreated",
    "GroupMemberAdded",
    "GroupMilestoneReached",
    "GroupUpdated",
]
