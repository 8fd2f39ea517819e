"""Read-only records the scheduling core consumes: services and providers."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Service:
    id: str
    provider_id: str
    name: str
    duration_in_minutes: int
    price_in_cents: int = 0
    description: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Provider:
    id: str
    name: str
    email: str
    slug: str
    business_name: str
    phone: str | None = None
