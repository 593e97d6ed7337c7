"""Deterministic keys for windowed activity aggregation."""

from __future__ import annotations

from datetime import datetime, timezone

from app.domain.entities import FEED_SCOPE_SITEWIDE

SITEWIDE_TARGET = "all"
_BUCKET_FORMAT = "%Y-%m-%dT%H:%M"


def window_bucket_start(now: datetime, window_minutes: int) -> datetime:
    """Floor ``now`` to the start of its ``window_minutes`` bucket, in UTC.

    Buckets are aligned on the Unix epoch, not on the wall-clock day.
    """

    if window_minutes <= 0:
        raise ValueError("window_minutes must be positive")
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    window_seconds = window_minutes * 60
    epoch_seconds = int(now.timestamp())
    bucket_seconds = epoch_seconds - (epoch_seconds % window_seconds)
    return datetime.fromtimestamp(bucket_seconds, tz=timezone.utc)


def aggregation_target(
    feed_scope: str, *, group_id: int | None = None, event_id: int | None = None
) -> str:
    """Return the target component of the key for ``feed_scope``."""

    if feed_scope == FEED_SCOPE_SITEWIDE:
        return SITEWIDE_TARGET
    target = group_id if group_id is not None else event_id
    return str(target) if target is not None else SITEWIDE_TARGET


def build_aggregation_key(
    activity_type: str,
    feed_scope: str,
    target_id: int | str,
    window_minutes: int,
    now: datetime,
) -> str:
    """Return ``type:scope:target:bucket`` for the window containing ``now``."""

    bucket = window_bucket_start(now, window_minutes).strftime(_BUCKET_FORMAT)
    return f"{activity_type}:{feed_scope}:{target_id}:{bucket}"


__all__ = [
    "SITEWIDE_TARGET",
    "aggregation_target",
    "build_aggregation_key",
    "window_bucket_start",
]
