"""Shared fixtures for the activity feed test-suite."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "activity-feed-test-secret")

from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.infrastructure.database import build_engine, initialize_database  # noqa: E402
from app.infrastructure.models import (  # noqa: E402
    EventModel,
    GroupMemberModel,
    GroupModel,
    UserModel,
)

TENANT = "tenant-a"


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class Seeder:
    """Insert the parent rows the activity feed reads from."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    def _add(self, model):
        session = self._session_factory()
        try:
            session.add(model)
            session.commit()
            session.refresh(model)
            return model.id
        finally:
            session.close()

    def user(
        self,
        slug: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        provider: str | None = None,
        social_id: str | None = None,
        tenant_id: str = TENANT,
    ) -> int:
        return self._add(
            UserModel(
                tenant_id=tenant_id,
                slug=slug,
                first_name=first_name if first_name is not None else slug.title(),
                last_name=last_name,
                provider=provider,
                social_id=social_id,
            )
        )

    def group(
        self,
        slug: str,
        *,
        visibility: str = "public",
        created_by: int | None = None,
        created_at: datetime | None = None,
        tenant_id: str = TENANT,
    ) -> int:
        return self._add(
            GroupModel(
                tenant_id=tenant_id,
                slug=slug,
                name=slug.replace("-", " ").title(),
                visibility=visibility,
                created_by=created_by,
                **_timestamp("created_at", created_at),
            )
        )

    def event(
        self,
        slug: str,
        *,
        visibility: str = "public",
        group_id: int | None = None,
        created_by: int | None = None,
        created_at: datetime | None = None,
        tenant_id: str = TENANT,
    ) -> int:
        return self._add(
            EventModel(
                tenant_id=tenant_id,
                slug=slug,
                name=slug.replace("-", " ").title(),
                visibility=visibility,
                group_id=group_id,
                created_by=created_by,
                **_timestamp("created_at", created_at),
            )
        )

    def member(
        self, group_id: int, user_id: int, *, joined_at: datetime | None = None
    ) -> int:
        return self._add(
            GroupMemberModel(
                group_id=group_id, user_id=user_id, **_timestamp("created_at", joined_at)
            )
        )


def _timestamp(column: str, value: datetime | None) -> dict[str, datetime]:
    if value is None:
        return {}
    return {column: value.astimezone(timezone.utc).replace(tzinfo=None)}


@pytest.fixture()
def engine(tmp_path):
    """Return an engine bound to a fresh SQLite database file."""

    test_engine = build_engine(f"sqlite:///{tmp_path / 'activity_feed.db'}")
    initialize_database(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)
