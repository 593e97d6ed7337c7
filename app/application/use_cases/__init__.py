"""Aggregate application use cases."""

from .activity_feed import ActivityFeedListener, create_activity, get_feed

__all__ = [
    "ActivityFeedListener",
    "create_activity",
    "get_feed",
]
