"""Aggregation engine: file an activity request as a new or merged record."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from ulid import ULID

from app.config import get_settings
from app.domain.entities import (
    AGGREGATION_NONE,
    AGGREGATION_STRATEGIES,
    FEED_SCOPES,
    ActivityRecord,
    ActivityRequest,
)
from app.infrastructure.repositories import ActivityFeedRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from .aggregation_keys import aggregation_target, build_aggregation_key
from .errors import ActivityStoreError, AggregationConflictError, StaleActivityError
from .visibility import resolve_activity_visibility

logger = logging.getLogger(__name__)

_DISPLAY_FIELDS = (
    ("group_slug", "groupSlug"),
    ("group_name", "groupName"),
    ("event_slug", "eventSlug"),
    ("event_name", "eventName"),
    ("actor_slug", "actorSlug"),
    ("actor_name", "actorName"),
)


class KeyedLock:
    """Mutual exclusion per key, with locks dropped once nobody waits on them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list[Any]] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)


aggregation_locks = KeyedLock()


def build_activity_metadata(request: ActivityRequest) -> dict[str, Any]:
    """Merge caller metadata with the slugs and names readers render."""

    metadata: dict[str, Any] = dict(request.metadata or {})
    for attribute, metadata_key in _DISPLAY_FIELDS:
        value = getattr(request, attribute)
        if value:
            metadata[metadata_key] = value
    return metadata


def new_activity_ulid(created_at: datetime) -> str:
    return str(ULID.from_datetime(created_at)).lower()


@dataclass(frozen=True)
class FiledActivity:
    """Outcome of filing a request: the stored record and whether it changed."""

    record: ActivityRecord
    changed: bool


def create_activity(
    session: Session,
    request: ActivityRequest,
    *,
    tenant_id: str,
    now: datetime | None = None,
    max_attempts: int | None = None,
) -> ActivityRecord:
    """Create a feed record for ``request`` or merge it into an open window.

    ``none`` requests always insert. Windowed requests look for a record with
    the same aggregation key created less than one window ago and add the
    actor to it; an actor already present leaves the record untouched.

    Raises :class:`ActivityStoreError` when the store fails and
    :class:`AggregationConflictError` when concurrent writers keep winning.
    """

    return file_activity(
        session, request, tenant_id=tenant_id, now=now, max_attempts=max_attempts
    ).record


def file_activity(
    session: Session,
    request: ActivityRequest,
    *,
    tenant_id: str,
    now: datetime | None = None,
    max_attempts: int | None = None,
) -> FiledActivity:
    """Like :func:`create_activity`, also telling whether the store changed."""

    if request.feed_scope not in FEED_SCOPES:
        raise ValueError(f"Unknown feed scope '{request.feed_scope}'")
    if request.aggregation_strategy not in AGGREGATION_STRATEGIES:
        raise ValueError(
            f"Unknown aggregation strategy '{request.aggregation_strategy}'"
        )

    now = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    visibility = resolve_activity_visibility(request.parent_visibility)
    repository = ActivityFeedRepository(session)

    if request.aggregation_strategy == AGGREGATION_NONE:
        record = _build_record(
            request, tenant_id=tenant_id, visibility=visibility, now=now
        )
        try:
            return FiledActivity(repository.create(record), changed=True)
        except SQLAlchemyError as exc:
            session.rollback()
            raise ActivityStoreError(
                f"Could not store '{request.activity_type}' activity"
            ) from exc

    window_minutes = request.effective_window_minutes
    aggregation_key = build_aggregation_key(
        request.activity_type,
        request.feed_scope,
        aggregation_target(
            request.feed_scope, group_id=request.group_id, event_id=request.event_id
        ),
        window_minutes,
        now,
    )
    cutoff = now - timedelta(minutes=window_minutes)
    attempts = max_attempts or get_settings().aggregation_max_attempts

    # The in-process lock keeps local writers off each other; the row lock and
    # the version check cover writers in other processes.
    with aggregation_locks.hold((tenant_id, aggregation_key)):
        for attempt in range(1, attempts + 1):
            if attempt > 1:
                _sleep_backoff(attempt - 1)
            try:
                existing = repository.get_fresh_by_aggregation_key(
                    aggregation_key,
                    tenant_id=tenant_id,
                    created_after=cutoff,
                    lock=True,
                )
                if existing is None:
                    record = _build_record(
                        request,
                        tenant_id=tenant_id,
                        visibility=visibility,
                        now=now,
                        aggregation_key=aggregation_key,
                    )
                    return FiledActivity(repository.create(record), changed=True)
                return _merge_into(repository, existing, request.actor_id, now)
            except IntegrityError as exc:
                session.rollback()
                if not repository.is_window_conflict(exc):
                    raise ActivityStoreError(
                        f"Could not open aggregation window {aggregation_key}"
                    ) from exc
                logger.debug(
                    "Aggregation window %s opened concurrently (attempt %s/%s)",
                    aggregation_key,
                    attempt,
                    attempts,
                )
            except StaleActivityError:
                logger.debug(
                    "Aggregation window %s merged concurrently (attempt %s/%s)",
                    aggregation_key,
                    attempt,
                    attempts,
                )
            except SQLAlchemyError as exc:
                session.rollback()
                raise ActivityStoreError(
                    f"Could not aggregate activity into window {aggregation_key}"
                ) from exc

    raise AggregationConflictError(
        f"Gave up merging into window {aggregation_key} after {attempts} attempts"
    )


def _sleep_backoff(retry: int) -> None:
    settings = get_settings()
    ceiling = min(
        settings.aggregation_retry_max_backoff_seconds,
        settings.aggregation_retry_backoff_seconds * (2 ** retry),
    )
    time.sleep(random.uniform(0, ceiling))


def _merge_into(
    repository: ActivityFeedRepository,
    existing: ActivityRecord,
    actor_id: int | None,
    now: datetime,
) -> FiledActivity:
    if actor_id is not None:
        if existing.has_actor(actor_id):
            # Releases the row lock taken by the lookup.
            repository.session.rollback()
            return FiledActivity(existing, changed=False)
        actor_ids = [*existing.actor_ids, actor_id]
        aggregated_count = len(actor_ids)
    else:
        # Anonymous counters have no identity to deduplicate on.
        actor_ids = list(existing.actor_ids)
        aggregated_count = existing.aggregated_count + 1

    # Feed order never moves backwards when history is replayed.
    updated_at = max(existing.updated_at, now) if existing.updated_at else now
    merged = repository.merge_actors(
        existing,
        actor_ids=actor_ids,
        aggregated_count=aggregated_count,
        updated_at=updated_at,
    )
    if merged is None:
        raise StaleActivityError(f"Activity {existing.ulid} changed while merging")
    return FiledActivity(merged, changed=True)



def _build_record(
    request: ActivityRequest,
    *,
    tenant_id: str,
    visibility: str,
    now: datetime,
    aggregation_key: str | None = None,
) -> ActivityRecord:
    return ActivityRecord(
        id=None,
        ulid=new_activity_ulid(now),
        tenant_id=tenant_id,
        activity_type=request.activity_type,
        feed_scope=request.feed_scope,
        visibility=visibility,
        group_id=request.group_id,
        event_id=request.event_id,
        actor_id=request.actor_id,
        actor_ids=[request.actor_id] if request.actor_id is not None else [],
        metadata=build_activity_metadata(request),
        aggregation_key=aggregation_key,
        aggregation_strategy=(
            request.aggregation_strategy if aggregation_key else AGGREGATION_NONE
        ),
        aggregated_count=1,
        created_at=now,
        updated_at=now,
    )


__all__ = [
    "FiledActivity",
    "KeyedLock",
    "aggregation_locks",
    "build_activity_metadata",
    "create_activity",
    "file_activity",
    "new_activity_ulid",
]
