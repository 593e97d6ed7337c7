"""ORM models used by the application infrastructure."""

from .activity_feed import AGGREGATION_WINDOW_CONSTRAINT, ActivityFeedModel
from .event import EventModel
from .group import GroupModel
from .group_member import GroupMemberModel
from .user import UserModel

__all__ = [
    "AGGREGATION_WINDOW_CONSTRAINT",
    "ActivityFeedModel",
    "EventModel",
    "GroupModel",
    "GroupMemberModel",
    "UserModel",
]
