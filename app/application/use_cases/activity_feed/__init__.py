"""Activity feed aggregation, fan-out and read use cases."""

from .aggregation_keys import (
    SITEWIDE_TARGET,
    aggregation_target,
    build_aggregation_key,
    window_bucket_start,
)
from .create_activity import (
    FiledActivity,
    KeyedLock,
    aggregation_locks,
    build_activity_metadata,
    create_activity,
    file_activity,
)
from .display_names import HandleResolver, resolve_display_names
from .errors import (
    ActivityFeedError,
    ActivityStoreError,
    AggregationConflictError,
    ParentNotFoundError,
    StaleActivityError,
)
from .fan_out import MEMBER_MILESTONES, ActivityFeedListener
from .get_feed import get_event_feed, get_feed, get_group_feed, get_sitewide_feed
from .visibility import resolve_activity_visibility, viewer_visibility_levels

__all__ = [
    "ActivityFeedError",
    "ActivityFeedListener",
    "ActivityStoreError",
    "AggregationConflictError",
    "FiledActivity",
    "HandleResolver",
    "KeyedLock",
    "MEMBER_MILESTONES",
    "ParentNotFoundError",
    "SITEWIDE_TARGET",
    "StaleActivityError",
    "aggregation_locks",
    "aggregation_target",
    "build_activity_metadata",
    "build_aggregation_key",
    "create_activity",
    "file_activity",
    "get_event_feed",
    "get_feed",
    "get_group_feed",
    "get_sitewide_feed",
    "resolve_activity_visibility",
    "resolve_display_names",
    "viewer_visibility_levels",
    "window_bucket_start",
]
