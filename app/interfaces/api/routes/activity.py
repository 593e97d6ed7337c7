"""Endpoints exposing the sitewide, group and event activity feeds."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.application.use_cases.activity_feed import (
    ActivityStoreError,
    get_event_feed,
    get_group_feed,
    get_sitewide_feed,
    viewer_visibility_levels,
)
from app.config import get_settings
from app.domain.entities import ActivityFeedItem, User
from app.infrastructure.database import get_db
from app.infrastructure.identity import ActorHandleCache
from app.infrastructure.repositories import EventRepository, GroupRepository
from app.interfaces.api.dependencies import (
    get_actor_handle_cache,
    get_optional_viewer,
    get_tenant_id,
)
from app.interfaces.api.schemas import ActivityFeedItemRead

router = APIRouter(tags=["activity"])

settings = get_settings()


def _item_to_schema(item: ActivityFeedItem) -> ActivityFeedItemRead:
    record = item.record
    return ActivityFeedItemRead(
        ulid=record.ulid,
        activity_type=record.activity_type,
        feed_scope=record.feed_scope,
        group_id=record.group_id,
        event_id=record.event_id,
        actor_id=record.actor_id,
        actor_ids=record.actor_ids,
        visibility=record.visibility,
        metadata=record.metadata,
        aggregation_strategy=record.aggregation_strategy,
        aggregated_count=record.aggregated_count,
        created_at=record.created_at,
        updated_at=record.updated_at,
        display_name=item.display_name,
    )


def _visibility_for(
    db: Session, viewer: User | None, group_id: int | None
) -> list[str]:
    is_member = False
    if viewer is not None and group_id is not None:
        is_member = GroupRepository(db).is_member(group_id, viewer.id)
    return viewer_visibility_levels(
        is_authenticated=viewer is not None, is_member=is_member
    )


def _feed_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="No fue posible obtener el feed de actividad",
    )


@router.get("/feed", response_model=list[ActivityFeedItemRead])
def read_sitewide_feed(
    limit: int = Query(
        settings.activity_feed_page_size,
        ge=1,
        le=settings.activity_feed_max_page_size,
        description="Número máximo de actividades a retornar",
    ),
    offset: int = Query(0, ge=0, description="Número de actividades a omitir"),
    tenant_id: str = Depends(get_tenant_id),
    viewer: User | None = Depends(get_optional_viewer),
    db: Session = Depends(get_db),
    handle_cache: ActorHandleCache = Depends(get_actor_handle_cache),
) -> list[ActivityFeedItemRead]:
    """Return the sitewide feed visible to the current viewer."""

    try:
        items = get_sitewide_feed(
            db,
            tenant_id=tenant_id,
            limit=limit,
            offset=offset,
            visibility=_visibility_for(db, viewer, None),
            resolver=handle_cache,
        )
    except ActivityStoreError as exc:
        raise _feed_unavailable() from exc
    return [_item_to_schema(item) for item in items]


@router.get("/groups/{group_slug}/feed", response_model=list[ActivityFeedItemRead])
def read_group_feed(
    group_slug: str,
    limit: int = Query(
        settings.activity_feed_page_size,
        ge=1,
        le=settings.activity_feed_max_page_size,
        description="Número máximo de actividades a retornar",
    ),
    offset: int = Query(0, ge=0, description="Número de actividades a omitir"),
    tenant_id: str = Depends(get_tenant_id),
    viewer: User | None = Depends(get_optional_viewer),
    db: Session = Depends(get_db),
    handle_cache: ActorHandleCache = Depends(get_actor_handle_cache),
) -> list[ActivityFeedItemRead]:
    """Return the feed of a group, filtered by the viewer's membership."""

    group = GroupRepository(db).get_by_slug(group_slug, tenant_id=tenant_id)
    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Grupo no encontrado"
        )

    try:
        items = get_group_feed(
            db,
            group.id,
            tenant_id=tenant_id,
            limit=limit,
            offset=offset,
            visibility=_visibility_for(db, viewer, group.id),
            resolver=handle_cache,
        )
    except ActivityStoreError as exc:
        raise _feed_unavailable() from exc
    return [_item_to_schema(item) for item in items]


@router.get("/events/{event_slug}/feed", response_model=list[ActivityFeedItemRead])
def read_event_feed(
    event_slug: str,
    limit: int = Query(
        settings.activity_feed_page_size,
        ge=1,
        le=settings.activity_feed_max_page_size,
        description="Número máximo de actividades a retornar",
    ),
    offset: int = Query(0, ge=0, description="Número de actividades a omitir"),
    tenant_id: str = Depends(get_tenant_id),
    viewer: User | None = Depends(get_optional_viewer),
    db: Session = Depends(get_db),
    handle_cache: ActorHandleCache = Depends(get_actor_handle_cache),
) -> list[ActivityFeedItemRead]:
    """Return the feed of an event, including group records about it."""

    event = EventRepository(db).get_by_slug(event_slug, tenant_id=tenant_id)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Evento no encontrado"
        )

    try:
        items = get_event_feed(
            db,
            event.id,
            tenant_id=tenant_id,
            limit=limit,
            offset=offset,
            visibility=_visibility_for(db, viewer, event.group_id),
            resolver=handle_cache,
        )
    except ActivityStoreError as exc:
        raise _feed_unavailable() from exc
    return [_item_to_schema(item) for item in items]


__all__ = ["router"]
