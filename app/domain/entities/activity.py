"""Domain entities describing activity feed records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

FEED_SCOPE_SITEWIDE = "sitewide"
FEED_SCOPE_GROUP = "group"
FEED_SCOPE_EVENT = "event"
FEED_SCOPES = (FEED_SCOPE_SITEWIDE, FEED_SCOPE_GROUP, FEED_SCOPE_EVENT)

ACTIVITY_VISIBILITY_PUBLIC = "public"
ACTIVITY_VISIBILITY_AUTHENTICATED = "authenticated"
ACTIVITY_VISIBILITY_MEMBERS_ONLY = "members_only"
ACTIVITY_VISIBILITY_PRIVATE = "private"

AGGREGATION_NONE = "none"
AGGREGATION_TIME_WINDOW = "time_window"
AGGREGATION_DAILY = "daily"
AGGREGATION_STRATEGIES = (AGGREGATION_NONE, AGGREGATION_TIME_WINDOW, AGGREGATION_DAILY)

ACTIVITY_GROUP_CREATED = "group.created"
ACTIVITY_GROUP_UPDATED = "group.updated"
ACTIVITY_GROUP_MILESTONE = "group.milestone"
ACTIVITY_GROUP_ACTIVITY = "group.activity"
ACTIVITY_MEMBER_JOINED = "member.joined"
ACTIVITY_EVENT_CREATED = "event.created"
ACTIVITY_EVENT_UPDATED = "event.updated"
ACTIVITY_EVENT_RSVP_ADDED = "event.rsvp.added"


@dataclass
class ActorSummary:
    """Local user data needed to render the actor of a feed record."""

    id: int
    slug: str | None
    first_name: str | None
    provider: str | None = None
    social_id: str | None = None


@dataclass
class ActivityRecord:
    """A single, possibly aggregated, entry of an activity feed."""

    id: int | None
    ulid: str
    tenant_id: str
    activity_type: str
    feed_scope: str
    visibility: str
    group_id: int | None = None
    event_id: int | None = None
    actor_id: int | None = None
    actor_ids: list[int] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    aggregation_key: str | None = None
    aggregation_strategy: str = AGGREGATION_NONE
    aggregated_count: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1
    actor: ActorSummary | None = None

    def has_actor(self, actor_id: int | None) -> bool:
        return actor_id is not None and actor_id in self.actor_ids


@dataclass
class ActivityFeedItem:
    """A feed record paired with the name used to render its actor."""

    record: ActivityRecord
    display_name: str | None = None


__all__ = [
    "ActivityFeedItem",
    "ActivityRecord",
    "ActorSummary",
    "FEED_SCOPE_SITEWIDE",
    "FEED_SCOPE_GROUP",
    "FEED_SCOPE_EVENT",
    "FEED_SCOPES",
    "ACTIVITY_VISIBILITY_PUBLIC",
    "ACTIVITY_VISIBILITY_AUTHENTICATED",
    "ACTIVITY_VISIBILITY_MEMBERS_ONLY",
    "ACTIVITY_VISIBILITY_PRIVATE",
    "AGGREGATION_NONE",
    "AGGREGATION_TIME_WINDOW",
    "AGGREGATION_DAILY",
    "AGGREGATION_STRATEGIES",
    "ACTIVITY_GROUP_CREATED",
    "ACTIVITY_GROUP_UPDATED",
    "ACTIVITY_GROUP_MILESTONE",
    "ACTIVITY_GROUP_ACTIVITY",
    "ACTIVITY_MEMBER_JOINED",
    "ACTIVITY_EVENT_CREATED",
    "ACTIVITY_EVENT_UPDATED",
    "ACTIVITY_EVENT_RSVP_ADDED",
]
