"""Replay historical groups, memberships and events into the activity feeds."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.use_cases.activity_feed import ActivityFeedListener
from app.config import get_settings
from app.domain.entities import EventCreated, GroupCreated, GroupMemberAdded
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import EventRepository, GroupRepository

logger = logging.getLogger(__name__)


@dataclass
class BackfillStats:
    groups_created: int = 0
    members_joined: int = 0
    events_created: int = 0
    errors: int = 0


def backfill_activity_feeds(
    session_factory: Callable[[], Session], *, tenant_id: str
) -> BackfillStats:
    """Create feed records for the tenant's existing data.

    Every domain event is replayed at its historical timestamp, so member
    joins aggregate into the windows they would have landed in. Milestones
    are not detected. Records written with the ``none`` strategy are not
    deduplicated, so the backfill should run once per tenant.
    """

    stats = BackfillStats()
    listener = ActivityFeedListener(session_factory, detect_milestones=False)

    session = session_factory()
    try:
        groups = GroupRepository(session).list_all(tenant_id=tenant_id)
        memberships = GroupRepository(session).list_memberships(tenant_id=tenant_id)
        events = EventRepository(session).list_all(tenant_id=tenant_id)
    finally:
        session.close()

    logger.info(
        "Backfilling tenant %s: %s groups, %s memberships, %s events",
        tenant_id,
        len(groups),
        len(memberships),
        len(events),
    )

    for group in groups:
        if group.created_by is None:
            logger.warning("Group %s has no creator; skipping", group.slug)
            stats.errors += 1
            continue
        event = GroupCreated(tenant_id, group.slug, group.created_by)
        if listener.handle(event, now=group.created_at):
            stats.groups_created += 1
        else:
            stats.errors += 1

    for group_slug, user_slug, joined_at in memberships:
        event = GroupMemberAdded(tenant_id, group_slug, user_slug)
        if listener.handle(event, now=joined_at):
            stats.members_joined += 1
        else:
            stats.errors += 1

    for item in events:
        if item.created_by is None:
            logger.warning("Event %s has no creator; skipping", item.slug)
            stats.errors += 1
            continue
        event = EventCreated(tenant_id, item.slug, item.created_by)
        if listener.handle(event, now=item.created_at):
            stats.events_created += 1
        else:
            stats.errors += 1

    return stats


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the backfill."""

    parser = argparse.ArgumentParser(
        description="Backfill activity feeds from existing groups and events.",
    )
    parser.add_argument(
        "--tenant",
        required=True,
        action="append",
        dest="tenants",
        help="Tenant a procesar. Puede indicarse varias veces.",
    )
    return parser.parse_args()


def main() -> None:
    """Run the backfill for every tenant passed on the command line."""

    args = parse_args()
    logging.basicConfig(level=get_settings().log_level.upper())

    try:
        initialize_database()
    except SQLAlchemyError as exc:
        raise SystemExit(f"No se pudo preparar la base de datos: {exc}") from exc

    for tenant_id in args.tenants:
        stats = backfill_activity_feeds(SessionLocal, tenant_id=tenant_id)
        print(
            f"Tenant {tenant_id}:\n"
            f"  Grupos creados: {stats.groups_created}\n"
            f"  Miembros unidos: {stats.members_joined}\n"
            f"  Eventos creados: {stats.events_created}\n"
            f"  Errores: {stats.errors}"
        )


if __name__ == "__main__":
    main()
