"""Tests for reading scoped feeds."""

from __future__ import annotations

import pytest

from app.application.use_cases.activity_feed import (
    create_activity,
    get_event_feed,
    get_feed,
    get_group_feed,
    get_sitewide_feed,
)
from app.domain.entities import ActivityRequest
from conftest import TENANT, utc


def _record(session, at, **fields):
    fields.setdefault("parent_visibility", "public")
    return create_activity(session, ActivityRequest(**fields), tenant_id=TENANT, now=at)


def test_group_feed_filters_by_visibility_and_orders_by_recency(session, seed):
    alice, bob, carol = seed.user("alice"), seed.user("bob"), seed.user("carol")
    _record(session, utc(2024, 5, 1, 9, 0), activity_type="group.created", feed_scope="group", group_id=42, actor_id=alice)
    for minute, actor in ((5, alice), (15, bob), (25, carol)):
        _record(
            session,
            utc(2024, 5, 1, 14, minute),
            activity_type="member.joined",
            feed_scope="group",
            group_id=42,
            actor_id=actor,
            aggregation_strategy="time_window",
        )
    _record(session, utc(2024, 5, 1, 15, 0), activity_type="group.updated", feed_scope="group", group_id=42, parent_visibility="private")
    _record(session, utc(2024, 5, 1, 16, 0), activity_type="group.created", feed_scope="group", group_id=7)

    items = get_feed(session, "group", 42, tenant_id=TENANT, visibility=["public"], limit=10, offset=0)

    assert [item.record.activity_type for item in items] == ["member.joined", "group.created"]
    joined = items[0].record
    assert joined.aggregated_count == 3
    assert joined.actor_ids == [alice, bob, carol]
    assert joined.updated_at == utc(2024, 5, 1, 14, 25)


def test_pagination_uses_offset_and_limit(session):
    for hour in range(5):
        _record(session, utc(2024, 5, 1, 10 + hour), activity_type="group.updated", feed_scope="group", group_id=42)

    first_page = get_group_feed(session, 42, tenant_id=TENANT, limit=2)
    second_page = get_group_feed(session, 42, tenant_id=TENANT, limit=2, offset=2)

    assert [item.record.updated_at.hour for item in first_page] == [14, 13]
    assert [item.record.updated_at.hour for item in second_page] == [12, 11]


def test_event_feed_includes_group_records_about_the_event(session):
    _record(session, utc(2024, 5, 1, 10), activity_type="event.created", feed_scope="group", group_id=42, event_id=5)
    _record(session, utc(2024, 5, 1, 11), activity_type="event.updated", feed_scope="event", event_id=5)
    _record(session, utc(2024, 5, 1, 12), activity_type="event.created", feed_scope="sitewide", group_id=42, event_id=5)
    _record(session, utc(2024, 5, 1, 13), activity_type="event.created", feed_scope="group", group_id=42, event_id=6)

    items = get_event_feed(session, 5, tenant_id=TENANT)

    assert [(i.record.feed_scope, i.record.activity_type) for i in items] == [
        ("event", "event.updated"),
        ("group", "event.created"),
    ]


def test_sitewide_feed_is_tenant_scoped(session):
    _record(session, utc(2024, 5, 1, 10), activity_type="group.created", feed_scope="sitewide", group_id=1)
    create_activity(
        session,
        ActivityRequest(activity_type="group.created", feed_scope="sitewide", group_id=2),
        tenant_id="tenant-b",
        now=utc(2024, 5, 1, 11),
    )

    items = get_sitewide_feed(session, tenant_id=TENANT)

    assert [item.record.group_id for item in items] == [1]


def test_display_names_fall_back_to_stored_names(session, seed):
    alice = seed.user("alice", first_name="Alice")
    _record(
        session,
        utc(2024, 5, 1, 10),
        activity_type="group.created",
        feed_scope="sitewide",
        actor_id=alice,
        actor_name="Alice Liddell",
    )
    _record(
        session,
        utc(2024, 5, 1, 11),
        activity_type="group.created",
        feed_scope="sitewide",
        actor_name="Former Member",
    )

    items = get_sitewide_feed(session, tenant_id=TENANT)

    assert [item.display_name for item in items] == ["Former Member", "Alice"]


@pytest.mark.parametrize(
    ("scope", "target_id", "options"),
    [
        ("planet", None, {}),
        ("group", None, {}),
        ("sitewide", None, {"limit": 0}),
        ("sitewide", None, {"offset": -1}),
    ],
)
def test_invalid_feed_queries_are_rejected(session, scope, target_id, options):
    with pytest.raises(ValueError):
        get_feed(session, scope, target_id, tenant_id=TENANT, **options)
