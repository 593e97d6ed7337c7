"""SQLAlchemy model for community groups."""

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func

from app.infrastructure.database import Base


class GroupModel(Base):
    """Database representation of a group, maintained by the CRUD layer."""

    __tablename__ = "group"
    __table_args__ = (UniqueConstraint("tenant_id", "slug", name="uq_group_tenant_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    slug = Column(String(120), nullable=False)
    name = Column(String(120), nullable=False)
    visibility = Column(String(20), nullable=False, default="public")
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["GroupModel"]
