"""Provider account model definitions."""

from sqlalchemy import Column, DateTime, String
from agenda.database import Base


class User(Base):
    """Represents a provider account offering services."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    business_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True))
