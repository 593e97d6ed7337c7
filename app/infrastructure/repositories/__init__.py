"""Repository implementations for infrastructure layer."""

from .activity_feed_repository import ActivityFeedRepository
from .event_repository import EventRepository
from .group_repository import GroupRepository
from .user_repository import UserRepository

__all__ = [
    "ActivityFeedRepository",
    "EventRepository",
    "GroupRepository",
    "UserRepository",
]
