"""Resolve the names shown next to feed records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from app.domain.entities import ActivityFeedItem, ActivityRecord, is_federated_identity

logger = logging.getLogger(__name__)


class HandleResolver(Protocol):
    def resolve_handles(self, dids: Iterable[str]) -> Mapping[str, str]: ...


def _federated_did(record: ActivityRecord) -> str | None:
    actor = record.actor
    if actor is None or not is_federated_identity(actor.provider, actor.social_id):
        return None
    return actor.social_id


def _local_name(record: ActivityRecord) -> str | None:
    if record.actor is not None and record.actor.first_name:
        return record.actor.first_name
    return record.metadata.get("actorName")


def resolve_display_names(
    records: Sequence[ActivityRecord], resolver: HandleResolver | None
) -> list[ActivityFeedItem]:
    """Pair each record with its actor's display name.

    Federated actors are resolved in a single batch. Any identity the
    resolver cannot improve on keeps the locally stored name.
    """

    dids = sorted({did for did in map(_federated_did, records) if did})
    handles: Mapping[str, str] = {}
    if dids and resolver is not None:
        try:
            handles = resolver.resolve_handles(dids)
        except Exception:
            logger.warning(
                "Handle resolution failed for %s actors; using local names",
                len(dids),
                exc_info=True,
            )
            handles = {}

    items: list[ActivityFeedItem] = []
    for record in records:
        display_name = _local_name(record)
        did = _federated_did(record)
        if did:
            handle = handles.get(did)
            if handle and handle != did:
                display_name = handle
        items.append(ActivityFeedItem(record=record, display_name=display_name))
    return items


__all__ = ["HandleResolver", "resolve_display_names"]
