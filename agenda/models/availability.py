"""Availability model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from agenda.database import Base


class Availability(Base):
    """Represents a provider's recurring open windows for one weekday."""
    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("provider_id", "day_of_week", name="uq_availability_provider_day"),
    )

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    day_of_week = Column(Integer, nullable=False)
    slots = Column(JSON, nullable=False)  # [{"start": "HH:MM", "end": "HH:MM"}, ...]
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
