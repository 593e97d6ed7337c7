"""Domain entities exposed by the application."""

from .activity import (
    ACTIVITY_EVENT_CREATED,
    ACTIVITY_EVENT_RSVP_ADDED,
    ACTIVITY_EVENT_UPDATED,
    ACTIVITY_GROUP_ACTIVITY,
    ACTIVITY_GROUP_CREATED,
    ACTIVITY_GROUP_MILESTONE,
    ACTIVITY_GROUP_UPDATED,
    ACTIVITY_MEMBER_JOINED,
    ACTIVITY_VISIBILITY_AUTHENTICATED,
    ACTIVITY_VISIBILITY_MEMBERS_ONLY,
    ACTIVITY_VISIBILITY_PRIVATE,
    ACTIVITY_VISIBILITY_PUBLIC,
    AGGREGATION_DAILY,
    AGGREGATION_NONE,
    AGGREGATION_STRATEGIES,
    AGGREGATION_TIME_WINDOW,
    FEED_SCOPE_EVENT,
    FEED_SCOPE_GROUP,
    FEED_SCOPE_SITEWIDE,
    FEED_SCOPES,
    ActivityFeedItem,
    ActivityRecord,
    ActorSummary,
)
from .activity_request import (
    DAILY_WINDOW_MINUTES,
    DEFAULT_WINDOW_MINUTES,
    ActivityRequest,
)
from .domain_event import (
    DomainEvent,
    EventCreated,
    EventRsvpAdded,
    EventUpdated,
    GroupCreated,
    GroupMemberAdded,
    GroupMilestoneReached,
    GroupUpdated,
)
from .event import Event
from .group import (
    GROUP_VISIBILITY_AUTHENTICATED,
    GROUP_VISIBILITY_PRIVATE,
    GROUP_VISIBILITY_PUBLIC,
    Group,
)
from .user import AUTH_PROVIDER_BLUESKY, User, is_federated_identity

__all__ = [
    "ActivityFeedItem",
    "ActivityRecord",
    "ActivityRequest",
    "ActorSummary",
    "DomainEvent",
    "Event",
    "EventCreated",
    "EventRsvpAdded",
    "EventUpdated",
    "Group",
    "GroupCreated",
    "GroupMemberAdded",
    "GroupMilestoneReached",
    "GroupUpdated",
    "User",
    "is_federated_identity",
    "AUTH_PROVIDER_BLUESKY",
    "DAILY_WINDOW_MINUTES",
    "DEFAULT_WINDOW_MINUTES",
    "FEED_SCOPE_SITEWIDE",
    "FEED_SCOPE_GROUP",
    "FEED_SCOPE_EVENT",
    "FEED_SCOPES",
    "GROUP_VISIBILITY_PUBLIC",
    "GROUP_VISIBILITY_AUTHENTICATED",
    "GROUP_VISIBILITY_PRIVATE",
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
