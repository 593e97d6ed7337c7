from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.activity_feed import (
    aggregation_target,
    build_aggregation_key,
    window_bucket_start,
)
from conftest import utc


def test_key_is_type_scope_target_and_bucket():
    key = build_aggregation_key("member.joined", "group", 42, 60, utc(2024, 5, 1, 14, 37, 12))

    assert key == "member.joined:group:42:2024-05-01T14:00"


@pytest.mark.parametrize(
    ("now", "window", "expected"),
    [
        (utc(2024, 5, 1, 14, 59, 59), 60, utc(2024, 5, 1, 14, 0)),
        (utc(2024, 5, 1, 15, 0, 0), 60, utc(2024, 5, 1, 15, 0)),
        (utc(2024, 5, 1, 14, 44), 30, utc(2024, 5, 1, 14, 30)),
        (utc(2024, 5, 1, 23, 59), 1440, utc(2024, 5, 1, 0, 0)),
    ],
)
def test_buckets_are_aligned_on_the_epoch(now, window, expected):
    assert window_bucket_start(now, window) == expected


def test_bucket_ignores_the_source_timezone():
    lima = timezone(timedelta(hours=-5))
    local = datetime(2024, 5, 1, 9, 45, tzinfo=lima)

    assert window_bucket_start(local, 60) == utc(2024, 5, 1, 14, 0)


def test_window_must_be_positive():
    with pytest.raises(ValueError):
        window_bucket_start(utc(2024, 5, 1), 0)


def test_sitewide_records_share_one_target():
    assert aggregation_target("sitewide", group_id=42) == "all"
    assert aggregation_target("group", group_id=42) == "42"
    assert aggregation_target("event", event_id=7) == "7"
