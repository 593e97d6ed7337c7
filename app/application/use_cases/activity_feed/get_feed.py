"""Use cases for reading scoped activity feeds."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    FEED_SCOPE_EVENT,
    FEED_SCOPE_GROUP,
    FEED_SCOPE_SITEWIDE,
    FEED_SCOPES,
    ActivityFeedItem,
)
from app.infrastructure.repositories import ActivityFeedRepository

from .display_names import HandleResolver, resolve_display_names
from .errors import ActivityStoreError


def get_feed(
    session: Session,
    scope: str,
    target_id: int | None = None,
    *,
    tenant_id: str,
    limit: int = 20,
    offset: int = 0,
    visibility: Sequence[str] | None = None,
    resolver: HandleResolver | None = None,
) -> list[ActivityFeedItem]:
    """Return one page of the ``scope`` feed, most recently touched first.

    ``target_id`` is the group id for group feeds and the event id for event
    feeds. Event feeds also list group-scoped records about that event.
    ``visibility`` restricts the page to the given levels when provided.
    """

    if scope not in FEED_SCOPES:
        raise ValueError(f"Unknown feed scope '{scope}'")
    if scope != FEED_SCOPE_SITEWIDE and target_id is None:
        raise ValueError(f"A target id is required for the {scope} feed")
    if limit <= 0:
        raise ValueError("limit must be positive")
    if offset < 0:
        raise ValueError("offset cannot be negative")

    filters: dict[str, object] = {}
    if scope == FEED_SCOPE_GROUP:
        feed_scopes = [FEED_SCOPE_GROUP]
        filters["group_id"] = target_id
    elif scope == FEED_SCOPE_EVENT:
        feed_scopes = [FEED_SCOPE_EVENT, FEED_SCOPE_GROUP]
        filters["event_id"] = target_id
    else:
        feed_scopes = [FEED_SCOPE_SITEWIDE]

    try:
        records = ActivityFeedRepository(session).list_feed(
            tenant_id=tenant_id,
            feed_scopes=feed_scopes,
            visibility=visibility,
            limit=limit,
            offset=offset,
            **filters,
        )
    except SQLAlchemyError as exc:
        raise ActivityStoreError(f"Could not read the {scope} feed") from exc

    return resolve_display_names(records, resolver)


def get_group_feed(
    session: Session, group_id: int, *, tenant_id: str, **options
) -> list[ActivityFeedItem]:
    return get_feed(session, FEED_SCOPE_GROUP, group_id, tenant_id=tenant_id, **options)


def get_event_feed(
    session: Session, event_id: int, *, tenant_id: str, **options
) -> list[ActivityFeedItem]:
    return get_feed(session, FEED_SCOPE_EVENT, event_id, tenant_id=tenant_id, **options)


def get_sitewide_feed(
    session: Session, *, tenant_id: str, **options
) -> list[ActivityFeedItem]:
    return get_feed(session, FEED_SCOPE_SITEWIDE, tenant_id=tenant_id, **options)


__all__ = ["get_event_feed", "get_feed", "get_group_feed", "get_sitewide_feed"]
