"""SQLAlchemy model for community events."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from app.infrastructure.database import Base


class EventModel(Base):
    """Database representation of an event, maintained by the CRUD layer."""

    __tablename__ = "event"
    __table_args__ = (UniqueConstraint("tenant_id", "slug", name="uq_event_tenant_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    slug = Column(String(120), nullable=False)
    name = Column(String(200), nullable=False)
    visibility = Column(String(20), nullable=False, default="public")
    group_id = Column(Integer, ForeignKey("group.id"), nullable=True, index=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["EventModel"]
