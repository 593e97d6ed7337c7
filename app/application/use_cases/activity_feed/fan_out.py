"""Fan-out of domain events into scoped activity feed records.

One domain event becomes one or two independent engine calls. Every branch
is isolated: a missing parent or a failed write is logged and never reaches
the code that emitted the domain event.

The visibility source of a record is the entity owning its feed scope: the
group for group-scoped records, the event for event-scoped and standalone
sitewide records.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from app.domain.entities import (
    ACTIVITY_EVENT_CREATED,
    ACTIVITY_EVENT_RSVP_ADDED,
    ACTIVITY_EVENT_UPDATED,
    ACTIVITY_GROUP_ACTIVITY,
    ACTIVITY_GROUP_CREATED,
    ACTIVITY_GROUP_MILESTONE,
    ACTIVITY_GROUP_UPDATED,
    ACTIVITY_MEMBER_JOINED,
    AGGREGATION_NONE,
    AGGREGATION_TIME_WINDOW,
    FEED_SCOPE_EVENT,
    FEED_SCOPE_GROUP,
    FEED_SCOPE_SITEWIDE,
    GROUP_VISIBILITY_PUBLIC,
    ActivityRecord,
    ActivityRequest,
    DomainEvent,
    Event,
    EventCreated,
    EventRsvpAdded,
    EventUpdated,
    Group,
    GroupCreated,
    GroupMemberAdded,
    GroupMilestoneReached,
    GroupUpdated,
    User,
)
from app.infrastructure.repositories import (
    EventRepository,
    GroupRepository,
    UserRepository,
)

from .create_activity import FiledActivity, file_activity
from .errors import ParentNotFoundError

logger = logging.getLogger(__name__)

MEMBER_MILESTONES = (10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)
MILESTONE_TYPE_MEMBERS = "members"
MEMBER_JOINED_WINDOW_MINUTES = 60
RSVP_WINDOW_MINUTES = 30

T = TypeVar("T")


def _require(value: T | None, kind: str, reference: object) -> T:
    if value is None:
        raise ParentNotFoundError(kind, reference)
    return value


def _group_fields(group: Group) -> dict[str, Any]:
    return {"group_id": group.id, "group_slug": group.slug, "group_name": group.name}


def _event_fields(event: Event) -> dict[str, Any]:
    return {"event_id": event.id, "event_slug": event.slug, "event_name": event.name}


def _actor_fields(user: User) -> dict[str, Any]:
    return {
        "actor_id": user.id,
        "actor_slug": user.slug,
        "actor_name": user.display_name,
    }


class ActivityFeedListener:
    """Translate domain events into activity engine calls.

    Each :meth:`handle` call opens its own session from ``session_factory``
    so listeners can run outside any HTTP request.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        detect_milestones: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._detect_milestones = detect_milestones

    def handle(
        self, event: DomainEvent, *, now: datetime | None = None
    ) -> list[ActivityRecord]:
        """Fan ``event`` out and return the records that were stored."""

        handler = _HANDLERS.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported domain event {type(event).__name__}")

        records: list[ActivityRecord] = []
        session = self._session_factory()
        try:
            handler(self, _FanOut(session, event.tenant_id, now, records), event)
        except ParentNotFoundError as exc:
            logger.info(
                "Skipping activity for %s in tenant %s: %s",
                type(event).__name__,
                event.tenant_id,
                exc,
            )
        except Exception:
            logger.exception(
                "Failed to fan out %s in tenant %s",
                type(event).__name__,
                event.tenant_id,
            )
        finally:
            session.close()
        return records

    def _on_group_created(self, fan_out: "_FanOut", event: GroupCreated) -> None:
        group = fan_out.require_group(event.group_slug)
        actor = fan_out.require_user(event.user_id)
        fields = {
            "activity_type": ACTIVITY_GROUP_CREATED,
            "parent_visibility": group.visibility,
            "aggregation_strategy": AGGREGATION_NONE,
            **_group_fields(group),
            **_actor_fields(actor),
        }
        fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_GROUP, **fields))
        if group.is_public():
            fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_SITEWIDE, **fields))

    def _on_group_updated(self, fan_out: "_FanOut", event: GroupUpdated) -> None:
        group = fan_out.require_group(event.group_slug)
        actor = fan_out.require_user(event.user_id)
        fan_out.emit(
            ActivityRequest(
                activity_type=ACTIVITY_GROUP_UPDATED,
                feed_scope=FEED_SCOPE_GROUP,
                parent_visibility=group.visibility,
                aggregation_strategy=AGGREGATION_NONE,
                **_group_fields(group),
                **_actor_fields(actor),
            )
        )

    def _on_member_added(self, fan_out: "_FanOut", event: GroupMemberAdded) -> None:
        group = fan_out.require_group(event.group_slug)
        member = fan_out.require_user_by_slug(event.user_slug)
        joined = fan_out.emit(
            ActivityRequest(
                activity_type=ACTIVITY_MEMBER_JOINED,
                feed_scope=FEED_SCOPE_GROUP,
                parent_visibility=group.visibility,
                aggregation_strategy=AGGREGATION_TIME_WINDOW,
                window_minutes=MEMBER_JOINED_WINDOW_MINUTES,
                **_group_fields(group),
                **_actor_fields(member),
            )
        )
        if joined is not None and not joined.changed:
            # Redelivered join: this actor is already in the window.
            return
        if group.is_private():
            # Sitewide readers only learn that some private group is active.
            fan_out.emit(
                ActivityRequest(
                    activity_type=ACTIVITY_GROUP_ACTIVITY,
                    feed_scope=FEED_SCOPE_SITEWIDE,
                    parent_visibility=GROUP_VISIBILITY_PUBLIC,
                    metadata={"activityCount": 1},
                    aggregation_strategy=AGGREGATION_TIME_WINDOW,
                    window_minutes=MEMBER_JOINED_WINDOW_MINUTES,
                )
            )
        if self._detect_milestones:
            self._check_member_milestone(fan_out, group)

    def _check_member_milestone(self, fan_out: "_FanOut", group: Group) -> None:
        # TODO: claim milestones transactionally; concurrent joins that read the
        # same count both emit it.
        try:
            member_count = fan_out.groups.count_members(group.id)
        except Exception:
            fan_out.session.rollback()
            logger.exception("Could not count members of group %s", group.slug)
            return
        if member_count in MEMBER_MILESTONES:
            self._emit_milestone(fan_out, group, MILESTONE_TYPE_MEMBERS, member_count)

    def _on_milestone(self, fan_out: "_FanOut", event: GroupMilestoneReached) -> None:
        group = fan_out.require_group(event.group_slug)
        self._emit_milestone(fan_out, group, event.milestone_type, event.value)

    def _emit_milestone(
        self, fan_out: "_FanOut", group: Group, milestone_type: str, value: int
    ) -> None:
        fields = {
            "activity_type": ACTIVITY_GROUP_MILESTONE,
            "parent_visibility": group.visibility,
            "metadata": {"milestoneType": milestone_type, "value": value},
            "aggregation_strategy": AGGREGATION_NONE,
            **_group_fields(group),
        }
        fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_GROUP, **fields))
        if group.is_public():
            fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_SITEWIDE, **fields))

    def _on_event_created(self, fan_out: "_FanOut", event: EventCreated) -> None:
        target, actor, group = self._resolve_event_parents(
            fan_out, event.event_slug, event.user_id
        )
        fields = {
            "activity_type": ACTIVITY_EVENT_CREATED,
            "aggregation_strategy": AGGREGATION_NONE,
            **_event_fields(target),
            **_actor_fields(actor),
        }
        if group is None:
            fan_out.emit(
                ActivityRequest(
                    feed_scope=FEED_SCOPE_SITEWIDE,
                    parent_visibility=target.visibility,
                    **fields,
                )
            )
            return

        fields.update(_group_fields(group), parent_visibility=group.visibility)
        fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_GROUP, **fields))
        if target.is_public() and group.is_public():
            fan_out.emit(ActivityRequest(feed_scope=FEED_SCOPE_SITEWIDE, **fields))

    def _on_event_updated(self, fan_out: "_FanOut", event: EventUpdated) -> None:
        target, actor, group = self._resolve_event_parents(
            fan_out, event.event_slug, event.user_id
        )
        fan_out.emit(
            self._event_scoped_request(
                ACTIVITY_EVENT_UPDATED, target, actor, group, AGGREGATION_NONE
            )
        )

    def _on_rsvp_added(self, fan_out: "_FanOut", event: EventRsvpAdded) -> None:
        target, actor, group = self._resolve_event_parents(
            fan_out, event.event_slug, event.user_id
        )
        fan_out.emit(
            self._event_scoped_request(
                ACTIVITY_EVENT_RSVP_ADDED,
                target,
                actor,
                group,
                AGGREGATION_TIME_WINDOW,
                window_minutes=RSVP_WINDOW_MINUTES,
            )
        )

    @staticmethod
    def _event_scoped_request(
        activity_type: str,
        target: Event,
        actor: User,
        group: Group | None,
        strategy: str,
        *,
        window_minutes: int = MEMBER_JOINED_WINDOW_MINUTES,
    ) -> ActivityRequest:
        """Build a request filed under the event's group, or the event itself."""

        if group is not None:
            scope_fields = {
                "feed_scope": FEED_SCOPE_GROUP,
                "parent_visibility": group.visibility,
                **_group_fields(group),
            }
        else:
            scope_fields = {
                "feed_scope": FEED_SCOPE_EVENT,
                "parent_visibility": target.visibility,
            }
        return ActivityRequest(
            activity_type=activity_type,
            aggregation_strategy=strategy,
            window_minutes=window_minutes,
            **scope_fields,
            **_event_fields(target),
            **_actor_fields(actor),
        )

    @staticmethod
    def _resolve_event_parents(
        fan_out: "_FanOut", event_slug: str, user_id: int
    ) -> tuple[Event, User, Group | None]:
        target = fan_out.require_event(event_slug)
        actor = fan_out.require_user(user_id)
        group = None
        if target.group_id is not None:
            group = fan_out.groups.get(target.group_id, tenant_id=fan_out.tenant_id)
            if group is None:
                logger.info(
                    "Group %s of event %s not found; treating the event as standalone",
                    target.group_id,
                    target.slug,
                )
        return target, actor, group


class _FanOut:
    """Per-event state shared by the branches of one fan-out."""

    def __init__(
        self,
        session: Session,
        tenant_id: str,
        now: datetime | None,
        records: list[ActivityRecord],
    ) -> None:
        self.session = session
        self.tenant_id = tenant_id
        self.now = now
        self.records = records
        self.groups = GroupRepository(session)
        self.events = EventRepository(session)
        self.users = UserRepository(session)

    def require_group(self, slug: str) -> Group:
        found = self.groups.get_by_slug(slug, tenant_id=self.tenant_id)
        return _require(found, "group", slug)

    def require_event(self, slug: str) -> Event:
        found = self.events.get_by_slug(slug, tenant_id=self.tenant_id)
        return _require(found, "event", slug)

    def require_user(self, user_id: int) -> User:
        found = self.users.get(user_id, tenant_id=self.tenant_id)
        return _require(found, "user", user_id)

    def require_user_by_slug(self, slug: str) -> User:
        found = self.users.get_by_slug(slug, tenant_id=self.tenant_id)
        return _require(found, "user", slug)

    def emit(self, request: ActivityRequest) -> FiledActivity | None:
        """Store one branch; a failure is logged and the next branch still runs."""

        try:
            filed = file_activity(
                self.session, request, tenant_id=self.tenant_id, now=self.now
            )
        except Exception:
            self.session.rollback()
            logger.exception(
                "Failed to store %s activity in the %s feed of tenant %s",
                request.activity_type,
                request.feed_scope,
                self.tenant_id,
            )
            return None
        self.records.append(filed.record)
        return filed


_HANDLERS: dict[type, Callable[[ActivityFeedListener, _FanOut, Any], None]] = {
    GroupCreated: ActivityFeedListener._on_group_created,
    GroupUpdated: ActivityFeedListener._on_group_updated,
    GroupMemberAdded: ActivityFeedListener._on_member_added,
    GroupMilestoneReached: ActivityFeedListener._on_milestone,
    EventCreated: ActivityFeedListener._on_event_created,
    EventUpdated: ActivityFeedListener._on_event_updated,
    EventRsvpAdded: ActivityFeedListener._on_rsvp_added,
}


__all__ = [
    "ActivityFeedListener",
    "MEMBER_JOINED_WINDOW_MINUTES",
    "MEMBER_MILESTONES",
    "MILESTONE_TYPE_MEMBERS",
    "RSVP_WINDOW_MINUTES",
]
