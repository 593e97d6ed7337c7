"""SQLAlchemy model for persisted activity feed records."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime

AGGREGATION_WINDOW_CONSTRAINT = "uq_activity_feed_tenant_aggregation_key"


class ActivityFeedModel(Base):
    """Database representation of an activity feed record."""

    __tablename__ = "activity_feed"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "aggregation_key", name=AGGREGATION_WINDOW_CONSTRAINT
        ),
        Index("ix_activity_feed_group_scope", "tenant_id", "feed_scope", "group_id"),
        Index("ix_activity_feed_event_scope", "tenant_id", "feed_scope", "event_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ulid = Column(String(26), nullable=False, unique=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    activity_type = Column(String(50), nullable=False)
    feed_scope = Column(String(20), nullable=False)
    group_id = Column(Integer, nullable=True)
    event_id = Column(Integer, nullable=True)
    actor_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    actor_ids = Column(JSON, nullable=False, default=list)
    visibility = Column(String(20), nullable=False, default="public")
    # ``metadata`` is reserved on declarative classes.
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    aggregation_key = Column(String(200), nullable=True)
    aggregation_strategy = Column(String(20), nullable=False, default="none")
    aggregated_count = Column(Integer, nullable=False, default=1)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )

    actor = relationship("UserModel", lazy="joined")


__all__ = ["AGGREGATION_WINDOW_CONSTRAINT", "ActivityFeedModel"]
