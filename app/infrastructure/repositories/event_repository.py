"""Read access to events."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Event
from app.infrastructure.models import EventModel
from app.utils import ensure_app_timezone


class EventRepository:
    """Lookups used by the activity feed; events are written elsewhere."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, event_id: int, *, tenant_id: str) -> Event | None:
        model = (
            self.session.query(EventModel)
            .filter(EventModel.tenant_id == tenant_id, EventModel.id == event_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def get_by_slug(self, slug: str, *, tenant_id: str) -> Event | None:
        model = (
            self.session.query(EventModel)
            .filter(EventModel.tenant_id == tenant_id, EventModel.slug == slug)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_all(self, *, tenant_id: str) -> Sequence[Event]:
        query = (
            self.session.query(EventModel)
            .filter(EventModel.tenant_id == tenant_id)
            .order_by(EventModel.created_at.asc(), EventModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    @staticmethod
    def _to_entity(model: EventModel) -> Event:
        return Event(
            id=model.id,
            tenant_id=model.tenant_id,
            slug=model.slug,
            name=model.name,
            visibility=model.visibility,
            group_id=model.group_id,
            created_by=model.created_by,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["EventRepository"]
