from app.application.use_cases.activity_feed import resolve_display_names
from app.domain.entities import ActivityRecord, ActorSummary


class FakeResolver:
    def __init__(self, handles=None, error=None):
        self.handles = handles or {}
        self.error = error
        self.calls = []

    def resolve_handles(self, dids):
        self.calls.append(list(dids))
        if self.error is not None:
            raise self.error
        return {did: self.handles.get(did, did) for did in dids}


def _record(actor=None, **metadata):
    return ActivityRecord(
        id=1,
        ulid="01hx",
        tenant_id="tenant-a",
        activity_type="member.joined",
        feed_scope="group",
        visibility="public",
        actor_id=actor.id if actor else None,
        metadata=metadata,
        actor=actor,
    )


def _federated(actor_id, did, first_name="Fallback"):
    return ActorSummary(
        id=actor_id, slug=f"user-{actor_id}", first_name=first_name, provider="bluesky", social_id=did
    )


def test_federated_actors_are_resolved_in_one_batch():
    resolver = FakeResolver({"did:plc:alice": "alice.bsky.social"})
    records = [
        _record(_federated(1, "did:plc:alice")),
        _record(_federated(1, "did:plc:alice")),
        _record(_federated(2, "did:plc:bob", first_name="Bob")),
    ]

    items = resolve_display_names(records, resolver)

    assert resolver.calls == [["did:plc:alice", "did:plc:bob"]]
    assert [item.display_name for item in items] == [
        "alice.bsky.social",
        "alice.bsky.social",
        "Bob",
    ]


def test_local_actors_skip_the_resolver():
    resolver = FakeResolver()
    local = ActorSummary(id=3, slug="carol", first_name="Carol", provider="email")

    items = resolve_display_names([_record(local)], resolver)

    assert resolver.calls == []
    assert items[0].display_name == "Carol"


def test_resolver_failures_keep_local_names(caplog):
    resolver = FakeResolver(error=RuntimeError("directory down"))

    items = resolve_display_names([_record(_federated(1, "did:plc:alice"))], resolver)

    assert items[0].display_name == "Fallback"
    assert "Handle resolution failed" in caplog.text


def test_records_without_an_actor_use_metadata():
    items = resolve_display_names([_record(actorName="Someone")], FakeResolver())

    assert items[0].display_name == "Someone"


def test_no_resolver_means_local_names():
    items = resolve_display_names([_record(_federated(1, "did:plc:alice"))], None)

    assert items[0].display_name == "Fallback"
