from .activity import ActivityFeedItemRead

__all__ = ["ActivityFeedItemRead"]
