"""Service model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from agenda.database import Base


class Service(Base):
    """Represents a bookable service offered by a provider."""
    __tablename__ = "services"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    duration_in_minutes = Column(Integer, nullable=False)
    price_in_cents = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
