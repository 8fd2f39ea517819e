"""Appointment model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from agenda.database import Base


class Appointment(Base):
    """Represents a booked appointment."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_provider_time_range", "provider_id", "starts_at", "ends_at"),
        # Two live bookings can never share a start instant for one provider.
        Index(
            "uq_appointments_provider_start_active",
            "provider_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
    )

    id = Column(String(36), primary_key=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), index=True, nullable=False)
    provider_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    observation = Column(String, nullable=True)
    cancel_reason = Column(String, nullable=True)
    canceled_by = Column(String, nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
