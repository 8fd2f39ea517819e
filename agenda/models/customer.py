"""Customer model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from agenda.database import Base


class Customer(Base):
    """Represents a customer who booked with a provider."""
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("provider_id", "email", name="uq_customers_provider_email"),
    )

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
