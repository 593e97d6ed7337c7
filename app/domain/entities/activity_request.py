"""Input accepted by the aggregation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .activity import AGGREGATION_DAILY, AGGREGATION_NONE

DEFAULT_WINDOW_MINUTES = 60
DAILY_WINDOW_MINUTES = 24 * 60


@dataclass(frozen=True)
class ActivityRequest:
    """Everything needed to file one activity under one feed scope.

    ``parent_visibility`` is the privacy setting of the group or event the
    activity belongs to; the record's own visibility is derived from it.
    """

    activity_type: str
    feed_scope: str
    parent_visibility: str | None = None
    group_id: int | None = None
    group_slug: str | None = None
    group_name: str | None = None
    event_id: int | None = None
    event_slug: str | None = None
    event_name: str | None = None
    actor_id: int | None = None
    actor_slug: str | None = None
    actor_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    aggregation_strategy: str = AGGREGATION_NONE
    window_minutes: int = DEFAULT_WINDOW_MINUTES

    @property
    def effective_window_minutes(self) -> int:
        if self.aggregation_strategy == AGGREGATION_DAILY:
            return DAILY_WINDOW_MINUTES
        return self.window_minutes


__all__ = ["ActivityRequest", "DAILY_WINDOW_MINUTES", "DEFAULT_WINDOW_MINUTES"]
