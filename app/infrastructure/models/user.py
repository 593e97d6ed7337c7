"""SQLAlchemy model for the user table."""

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func

from app.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a platform user."""

    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("tenant_id", "slug", name="uq_user_tenant_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    slug = Column(String(120), nullable=False)
    first_name = Column(String(60), nullable=True)
    last_name = Column(String(60), nullable=True)
    provider = Column(String(30), nullable=True)
    social_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
