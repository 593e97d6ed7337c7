"""Read access to groups and their memberships."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import Group
from app.infrastructure.models import GroupMemberModel, GroupModel, UserModel
from app.utils import ensure_app_timezone


class GroupRepository:
    """Lookups used by the activity feed; groups are written elsewhere."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, group_id: int, *, tenant_id: str) -> Group | None:
        model = (
            self.session.query(GroupModel)
            .filter(GroupModel.tenant_id == tenant_id, GroupModel.id == group_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def get_by_slug(self, slug: str, *, tenant_id: str) -> Group | None:
        model = (
            self.session.query(GroupModel)
            .filter(GroupModel.tenant_id == tenant_id, GroupModel.slug == slug)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_all(self, *, tenant_id: str) -> Sequence[Group]:
        query = (
            self.session.query(GroupModel)
            .filter(GroupModel.tenant_id == tenant_id)
            .order_by(GroupModel.created_at.asc(), GroupModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def count_members(self, group_id: int) -> int:
        return (
            self.session.query(func.count(GroupMemberModel.id))
            .filter(GroupMemberModel.group_id == group_id)
            .scalar()
            or 0
        )

    def is_member(self, group_id: int, user_id: int) -> bool:
        return (
            self.session.query(GroupMemberModel.id)
            .filter(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.user_id == user_id,
            )
            .first()
            is not None
        )

    def list_memberships(self, *, tenant_id: str) -> list[tuple[str, str, datetime]]:
        """Return ``(group_slug, user_slug, joined_at)`` ordered by join time."""

        rows = (
            self.session.query(
                GroupModel.slug, UserModel.slug, GroupMemberModel.created_at
            )
            .join(GroupModel, GroupMemberModel.group_id == GroupModel.id)
            .join(UserModel, GroupMemberModel.user_id == UserModel.id)
            .filter(GroupModel.tenant_id == tenant_id)
            .order_by(GroupMemberModel.created_at.asc(), GroupMemberModel.id.asc())
            .all()
        )
        return [
            (group_slug, user_slug, ensure_app_timezone(joined_at))
            for group_slug, user_slug, joined_at in rows
        ]

    @staticmethod
    def _to_entity(model: GroupModel) -> Group:
        return Group(
            id=model.id,
            tenant_id=model.tenant_id,
            slug=model.slug,
            name=model.name,
            visibility=model.visibility,
            created_by=model.created_by,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["GroupRepository"]
