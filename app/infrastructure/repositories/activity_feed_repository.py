"""Persistence helpers for activity feed records."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.entities import ActivityRecord, ActorSummary
from app.infrastructure.models import AGGREGATION_WINDOW_CONSTRAINT, ActivityFeedModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone


class ActivityFeedRepository:
    """Activity store: insert, windowed lookup, conditional merge and feed queries.

    Every method takes the tenant explicitly; nothing is read from ambient
    request state.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: ActivityRecord) -> ActivityRecord:
        """Insert ``record``.

        Raises :class:`sqlalchemy.exc.IntegrityError` on constraint failures;
        :meth:`is_window_conflict` tells a concurrently opened window apart.
        """

        model = ActivityFeedModel()
        self._apply_entity_to_model(model, record)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get_fresh_by_aggregation_key(
        self,
        aggregation_key: str,
        *,
        tenant_id: str,
        created_after: datetime,
        lock: bool = False,
    ) -> ActivityRecord | None:
        """Return the newest record of the window opened after ``created_after``.

        With ``lock`` the row stays locked until the session commits or rolls
        back, so merges from other processes queue behind this one. Backends
        without row locks (SQLite) ignore it.
        """

        query = (
            self.session.query(ActivityFeedModel)
            .filter(ActivityFeedModel.tenant_id == tenant_id)
            .filter(ActivityFeedModel.aggregation_key == aggregation_key)
            .filter(
                ActivityFeedModel.created_at > ensure_app_naive_datetime(created_after)
            )
            .order_by(ActivityFeedModel.created_at.desc())
        )
        if lock:
            query = query.with_for_update(of=ActivityFeedModel)
        model = query.first()
        return self._to_entity(model) if model else None

    @staticmethod
    def is_window_conflict(exc: IntegrityError) -> bool:
        """Whether ``exc`` reports a second record for an open aggregation window."""

        message = str(exc.orig)
        return (
            AGGREGATION_WINDOW_CONSTRAINT in message
            or "activity_feed.aggregation_key" in message
        )

    def merge_actors(
        self,
        record: ActivityRecord,
        *,
        actor_ids: Sequence[int],
        aggregated_count: int,
        updated_at: datetime,
    ) -> ActivityRecord | None:
        """Persist a merge only if nobody else merged since ``record`` was read.

        Returns ``None`` when the stored version moved on, so the caller can
        re-read and merge again.
        """

        if record.id is None:
            raise ValueError("Activity id is required for merges")
        updated_rows = (
            self.session.query(ActivityFeedModel)
            .filter(
                ActivityFeedModel.id == record.id,
                ActivityFeedModel.tenant_id == record.tenant_id,
                ActivityFeedModel.version == record.version,
            )
            .update(
                {
                    ActivityFeedModel.actor_ids: list(actor_ids),
                    ActivityFeedModel.aggregated_count: aggregated_count,
                    ActivityFeedModel.updated_at: ensure_app_naive_datetime(updated_at),
                    ActivityFeedModel.version: ActivityFeedModel.version + 1,
                },
                synchronize_session=False,
            )
        )
        if updated_rows == 0:
            self.session.rollback()
            return None
        self.session.commit()
        return replace(
            record,
            actor_ids=list(actor_ids),
            aggregated_count=aggregated_count,
            updated_at=ensure_app_timezone(updated_at),
            version=record.version + 1,
        )

    def list_feed(
        self,
        *,
        tenant_id: str,
        feed_scopes: Sequence[str],
        group_id: int | None = None,
        event_id: int | None = None,
        visibility: Sequence[str] | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[ActivityRecord]:
        query = (
            self.session.query(ActivityFeedModel)
            .filter(ActivityFeedModel.tenant_id == tenant_id)
            .filter(ActivityFeedModel.feed_scope.in_(list(feed_scopes)))
        )
        if group_id is not None:
            query = query.filter(ActivityFeedModel.group_id == group_id)
        if event_id is not None:
            query = query.filter(ActivityFeedModel.event_id == event_id)
        if visibility is not None:
            query = query.filter(ActivityFeedModel.visibility.in_(list(visibility)))
        query = query.order_by(
            ActivityFeedModel.updated_at.desc(), ActivityFeedModel.id.desc()
        )
        query = query.offset(offset).limit(limit)
        return [self._to_entity(model) for model in query.all()]

    @staticmethod
    def _apply_entity_to_model(model: ActivityFeedModel, record: ActivityRecord) -> None:
        model.ulid = record.ulid
        model.tenant_id = record.tenant_id
        model.activity_type = record.activity_type
        model.feed_scope = record.feed_scope
        model.group_id = record.group_id
        model.event_id = record.event_id
        model.actor_id = record.actor_id
        model.actor_ids = list(record.actor_ids)
        model.visibility = record.visibility
        model.metadata_ = dict(record.metadata or {})
        model.aggregation_key = record.aggregation_key
        model.aggregation_strategy = record.aggregation_strategy
        model.aggregated_count = record.aggregated_count
        model.version = record.version
        model.created_at = ensure_app_naive_datetime(record.created_at)
        model.updated_at = ensure_app_naive_datetime(
            record.updated_at or record.created_at
        )

    @staticmethod
    def _to_entity(model: ActivityFeedModel) -> ActivityRecord:
        actor = None
        if model.actor is not None:
            actor = ActorSummary(
                id=model.actor.id,
                slug=model.actor.slug,
                first_name=model.actor.first_name,
                provider=model.actor.provider,
                social_id=model.actor.social_id,
            )
        return ActivityRecord(
            id=model.id,
            ulid=model.ulid,
            tenant_id=model.tenant_id,
            activity_type=model.activity_type,
            feed_scope=model.feed_scope,
            visibility=model.visibility,
            group_id=model.group_id,
            event_id=model.event_id,
            actor_id=model.actor_id,
            actor_ids=list(model.actor_ids or []),
            metadata=dict(model.metadata_ or {}),
            aggregation_key=model.aggregation_key,
            aggregation_strategy=model.aggregation_strategy,
            aggregated_count=model.aggregated_count,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            version=model.version,
            actor=actor,
        )


__all__ = ["ActivityFeedRepository"]
