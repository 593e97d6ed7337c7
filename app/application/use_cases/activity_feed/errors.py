"""Errors raised by the activity feed use cases."""


class ActivityFeedError(RuntimeError):
    """Base class for activity feed failures."""


class ActivityStoreError(ActivityFeedError):
    """The activity store could not be read or written.

    Upstream queues may retry the originating domain event when they see it.
    """


class AggregationConflictError(ActivityStoreError):
    """Concurrent writers kept winning the same aggregation window."""


class StaleActivityError(ActivityFeedError):
    """A merge lost the race against another writer of the same record."""


class ParentNotFoundError(LookupError):
    """A group, event or user referenced by a domain event does not exist."""

    def __init__(self, kind: str, reference: object) -> None:
        super().__init__(f"{kind} '{reference}' not found")
        self.kind = kind
        self.reference = reference


__all__ = [
    "ActivityFeedError",
    "ActivityStoreError",
    "AggregationConflictError",
    "ParentNotFoundError",
    "StaleActivityError",
]
