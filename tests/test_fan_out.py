"""Tests for the domain event fan-out listener."""

from __future__ import annotations

import logging
import typing

import pytest

from app.application.use_cases.activity_feed import fan_out
from app.application.use_cases.activity_feed import ActivityFeedListener
from app.domain.entities import (
    DomainEvent,
    EventCreated,
    EventRsvpAdded,
    EventUpdated,
    GroupCreated,
    GroupMemberAdded,
    GroupMilestoneReached,
    GroupUpdated,
)
from app.infrastructure.models import ActivityFeedModel
from conftest import TENANT, utc

NOW = utc(2024, 5, 1, 14, 10)


@pytest.fixture()
def listener(session_factory) -> ActivityFeedListener:
    return ActivityFeedListener(session_factory)


def _rows(session_factory) -> list[ActivityFeedModel]:
    session = session_factory()
    try:
        return session.query(ActivityFeedModel).order_by(ActivityFeedModel.id).all()
    finally:
        session.close()


def _scopes(records) -> list[tuple[str, str]]:
    return [(record.feed_scope, record.visibility) for record in records]


def test_every_domain_event_has_a_handler():
    assert set(typing.get_args(DomainEvent)) == set(fan_out._HANDLERS)


def test_unknown_domain_events_are_rejected(listener):
    with pytest.raises(TypeError):
        listener.handle(object())


def test_public_group_creation_reaches_the_sitewide_feed(listener, seed):
    owner = seed.user("olga")
    seed.group("tech-talks", visibility="public", created_by=owner)

    records = listener.handle(GroupCreated(TENANT, "tech-talks", owner), now=NOW)

    assert [r.activity_type for r in records] == ["group.created", "group.created"]
    assert _scopes(records) == [("group", "public"), ("sitewide", "public")]
    assert records[1].metadata["groupSlug"] == "tech-talks"


def test_private_group_creation_stays_in_the_group(listener, seed):
    owner = seed.user("olga")
    seed.group("inner-circle", visibility="private", created_by=owner)

    records = listener.handle(GroupCreated(TENANT, "inner-circle", owner), now=NOW)

    assert _scopes(records) == [("group", "members_only")]


def test_member_joining_a_public_group_creates_one_record(listener, seed):
    group = seed.group("tech-talks", visibility="public")
    member = seed.user("alice")
    seed.member(group, member)

    records = listener.handle(GroupMemberAdded(TENANT, "tech-talks", "alice"), now=NOW)

    assert len(records) == 1
    assert records[0].activity_type == "member.joined"
    assert records[0].actor_ids == [member]


def test_member_joining_an_authenticated_group_creates_one_record(listener, seed):
    group = seed.group("locals", visibility="authenticated")
    seed.member(group, seed.user("alice"))

    records = listener.handle(GroupMemberAdded(TENANT, "locals", "alice"), now=NOW)

    assert _scopes(records) == [("group", "authenticated")]


def test_member_joining_a_private_group_is_anonymized_sitewide(listener, seed):
    group = seed.group("inner-circle", visibility="private")
    seed.member(group, seed.user("alice"))

    records = listener.handle(GroupMemberAdded(TENANT, "inner-circle", "alice"), now=NOW)

    assert _scopes(records) == [("group", "members_only"), ("sitewide", "public")]
    anonymized = records[1]
    assert anonymized.activity_type == "group.activity"
    assert anonymized.metadata == {"activityCount": 1}
    assert anonymized.group_id is None
    assert anonymized.actor_id is None
    assert anonymized.actor_ids == []
    assert anonymized.aggregation_key == "group.activity:sitewide:all:2024-05-01T14:00"


def test_redelivered_private_join_is_counted_once_sitewide(
    listener, seed, session_factory
):
    group = seed.group("inner-circle", visibility="private")
    seed.member(group, seed.user("alice"))
    event = GroupMemberAdded(TENANT, "inner-circle", "alice")

    for _ in range(3):
        listener.handle(event, now=NOW)

    rows = _rows(session_factory)
    assert [(row.activity_type, row.aggregated_count) for row in rows] == [
        ("member.joined", 1),
        ("group.activity", 1),
    ]


def test_a_second_private_join_bumps_the_sitewide_counter(
    listener, seed, session_factory
):
    group = seed.group("inner-circle", visibility="private")
    seed.member(group, seed.user("alice"))
    seed.member(group, seed.user("bob"))

    listener.handle(GroupMemberAdded(TENANT, "inner-circle", "alice"), now=NOW)
    listener.handle(GroupMemberAdded(TENANT, "inner-circle", "bob"), now=NOW)

    rows = _rows(session_factory)
    assert [(row.activity_type, row.aggregated_count) for row in rows] == [
        ("member.joined", 2),
        ("group.activity", 2),
    ]


def test_redelivered_tenth_join_does_not_repeat_the_milestone(listener, seed):
    group = seed.group("tech-talks", visibility="public")
    for index in range(10):
        seed.member(group, seed.user(f"member-{index}"))
    event = GroupMemberAdded(TENANT, "tech-talks", "member-9")

    listener.handle(event, now=NOW)
    records = listener.handle(event, now=NOW)

    assert [r.activity_type for r in records] == ["member.joined"]


def test_tenth_member_triggers_a_milestone(listener, seed):
    group = seed.group("tech-talks", visibility="public")
    for index in range(10):
        seed.member(group, seed.user(f"member-{index}"))

    records = listener.handle(GroupMemberAdded(TENANT, "tech-talks", "member-9"), now=NOW)

    milestones = [r for r in records if r.activity_type == "group.milestone"]
    assert _scopes(milestones) == [("group", "public"), ("sitewide", "public")]
    assert milestones[0].metadata["milestoneType"] == "members"
    assert milestones[0].metadata["value"] == 10


def test_milestone_detection_can_be_disabled(session_factory, seed):
    group = seed.group("tech-talks", visibility="public")
    for index in range(10):
        seed.member(group, seed.user(f"member-{index}"))
    listener = ActivityFeedListener(session_factory, detect_milestones=False)

    records = listener.handle(GroupMemberAdded(TENANT, "tech-talks", "member-9"), now=NOW)

    assert [r.activity_type for r in records] == ["member.joined"]


def test_explicit_milestone_event(listener, seed):
    seed.group("inner-circle", visibility="private")

    records = listener.handle(
        GroupMilestoneReached(TENANT, "inner-circle", "events", 25), now=NOW
    )

    assert _scopes(records) == [("group", "members_only")]
    assert records[0].metadata["value"] == 25


def test_group_update_stays_in_the_group(listener, seed):
    owner = seed.user("olga")
    seed.group("tech-talks", created_by=owner)

    records = listener.handle(GroupUpdated(TENANT, "tech-talks", owner), now=NOW)

    assert _scopes(records) == [("group", "public")]
    assert records[0].activity_type == "group.updated"


def test_event_in_a_public_group_fans_out_twice(listener, seed):
    owner = seed.user("olga")
    group = seed.group("tech-talks", visibility="public")
    event = seed.event("launch-party", group_id=group, created_by=owner)

    records = listener.handle(EventCreated(TENANT, "launch-party", owner), now=NOW)

    assert _scopes(records) == [("group", "public"), ("sitewide", "public")]
    assert all(record.event_id == event for record in records)
    assert records[0].metadata["eventSlug"] == "launch-party"


def test_private_event_in_a_public_group_skips_the_sitewide_feed(listener, seed):
    owner = seed.user("olga")
    group = seed.group("tech-talks", visibility="public")
    seed.event("board-meeting", visibility="private", group_id=group)

    records = listener.handle(EventCreated(TENANT, "board-meeting", owner), now=NOW)

    assert _scopes(records) == [("group", "public")]


def test_standalone_event_goes_to_the_sitewide_feed(listener, seed):
    owner = seed.user("olga")
    seed.event("meetup", visibility="authenticated")

    records = listener.handle(EventCreated(TENANT, "meetup", owner), now=NOW)

    assert _scopes(records) == [("sitewide", "authenticated")]
    assert records[0].group_id is None


def test_event_with_a_missing_group_is_treated_as_standalone(listener, seed):
    owner = seed.user("olga")
    seed.event("orphan", group_id=9999)

    records = listener.handle(EventCreated(TENANT, "orphan", owner), now=NOW)

    assert _scopes(records) == [("sitewide", "public")]


def test_rsvps_aggregate_in_the_event_group(listener, seed):
    group = seed.group("tech-talks")
    seed.event("launch-party", group_id=group)
    alice, bob = seed.user("alice"), seed.user("bob")

    listener.handle(EventRsvpAdded(TENANT, "launch-party", alice), now=NOW)
    records = listener.handle(
        EventRsvpAdded(TENANT, "launch-party", bob), now=utc(2024, 5, 1, 14, 20)
    )

    assert records[0].feed_scope == "group"
    assert records[0].aggregated_count == 2
    assert records[0].aggregation_key == f"event.rsvp.added:group:{group}:2024-05-01T14:00"


def test_rsvps_to_standalone_events_use_the_event_feed(listener, seed):
    event = seed.event("meetup")
    alice = seed.user("alice")

    records = listener.handle(EventRsvpAdded(TENANT, "meetup", alice), now=NOW)

    assert records[0].feed_scope == "event"
    assert records[0].aggregation_key == f"event.rsvp.added:event:{event}:2024-05-01T14:00"


def test_event_update_is_scoped_to_the_event_when_standalone(listener, seed):
    owner = seed.user("olga")
    seed.event("meetup")

    records = listener.handle(EventUpdated(TENANT, "meetup", owner), now=NOW)

    assert _scopes(records) == [("event", "public")]


def test_missing_parents_are_skipped(listener, seed, session_factory, caplog):
    owner = seed.user("olga")

    with caplog.at_level(logging.INFO):
        records = listener.handle(GroupCreated(TENANT, "ghost", owner), now=NOW)

    assert records == []
    assert _rows(session_factory) == []
    assert "group 'ghost' not found" in caplog.text


def test_parents_are_looked_up_in_the_event_tenant(listener, seed):
    owner = seed.user("olga", tenant_id="tenant-b")
    seed.group("tech-talks", created_by=owner, tenant_id="tenant-b")

    assert listener.handle(GroupCreated(TENANT, "tech-talks", owner), now=NOW) == []


def test_a_failing_branch_does_not_stop_its_sibling(listener, seed, monkeypatch):
    owner = seed.user("olga")
    seed.group("tech-talks", visibility="public", created_by=owner)
    original = fan_out.file_activity

    def fail_group_scope(session, request, **kwargs):
        if request.feed_scope == "group":
            raise RuntimeError("store unavailable")
        return original(session, request, **kwargs)

    monkeypatch.setattr(fan_out, "file_activity", fail_group_scope)

    records = listener.handle(GroupCreated(TENANT, "tech-talks", owner), now=NOW)

    assert _scopes(records) == [("sitewide", "public")]
