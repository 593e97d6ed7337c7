"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import User
from app.infrastructure.models import UserModel


class UserRepository:
    """Resolve users referenced by domain events and viewer tokens."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int, *, tenant_id: str) -> User | None:
        model = self._get_model(tenant_id, id=user_id)
        return self._to_entity(model) if model else None

    def get_by_slug(self, slug: str, *, tenant_id: str) -> User | None:
        model = self._get_model(tenant_id, slug=slug)
        return self._to_entity(model) if model else None

    def _get_model(self, tenant_id: str, **filters) -> UserModel | None:
        return (
            self.session.query(UserModel)
            .filter_by(tenant_id=tenant_id, **filters)
            .first()
        )

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            tenant_id=model.tenant_id,
            slug=model.slug,
            first_name=model.first_name,
            last_name=model.last_name,
            provider=model.provider,
            social_id=model.social_id,
        )


__all__ = ["UserRepository"]
