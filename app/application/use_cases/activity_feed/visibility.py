"""Mapping between parent privacy settings and activity visibility."""

from __future__ import annotations

from app.domain.entities import (
    ACTIVITY_VISIBILITY_AUTHENTICATED,
    ACTIVITY_VISIBILITY_MEMBERS_ONLY,
    ACTIVITY_VISIBILITY_PUBLIC,
    GROUP_VISIBILITY_AUTHENTICATED,
    GROUP_VISIBILITY_PRIVATE,
    GROUP_VISIBILITY_PUBLIC,
)

_VISIBILITY_MAP = {
    GROUP_VISIBILITY_PUBLIC: ACTIVITY_VISIBILITY_PUBLIC,
    GROUP_VISIBILITY_AUTHENTICATED: ACTIVITY_VISIBILITY_AUTHENTICATED,
    GROUP_VISIBILITY_PRIVATE: ACTIVITY_VISIBILITY_MEMBERS_ONLY,
}


def resolve_activity_visibility(parent_visibility: str | None) -> str:
    """Return the feed visibility for an activity under ``parent_visibility``.

    This is the only place an activity's visibility is decided. Unknown or
    missing values resolve to ``public``.
    """

    key = (parent_visibility or "").strip().lower()
    return _VISIBILITY_MAP.get(key, ACTIVITY_VISIBILITY_PUBLIC)


def viewer_visibility_levels(*, is_authenticated: bool, is_member: bool = False) -> list[str]:
    """Return the visibility levels a viewer may read."""

    levels = [ACTIVITY_VISIBILITY_PUBLIC]
    if is_authenticated:
        levels.append(ACTIVITY_VISIBILITY_AUTHENTICATED)
        if is_member:
            levels.append(ACTIVITY_VISIBILITY_MEMBERS_ONLY)
    return levels


__all__ = ["resolve_activity_visibility", "viewer_visibility_levels"]
