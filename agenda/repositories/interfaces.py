"""Persistence contracts the scheduling core depends on.

Implementations flush but never commit; the request handler owns the
transaction.
"""

from datetime import datetime
from typing import Protocol

from agenda.domain.appointment import Appointment
from agenda.domain.availability import Availability
from agenda.domain.customer import Customer
from agenda.domain.service import Provider, Service


class AppointmentOverlapError(Exception):
    """Raised by an appointment store when a write would double-book a provider."""


class DuplicateCustomerError(Exception):
    """Raised by a customer store when another writer already created this provider+email."""


class AppointmentRepository(Protocol):
    def save(self, appointment: Appointment) -> None:
        """Insert or update. Inserts must re-check overlap and raise AppointmentOverlapError."""
        ...

    def find_by_id(self, appointment_id: str) -> Appointment | None:
        ...

    def find_by_provider_id(self, provider_id: str) -> list[Appointment]:
        ...

    def find_by_customer_id(self, customer_id: str) -> list[Appointment]:
        ...

    def find_overlapping(
        self,
        provider_id: str,
        starts_at: datetime,
        ends_at: datetime,
        exclude_id: str | None = None,
    ) -> Appointment | None:
        ...

    def find_by_provider_and_date_range(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        ...

    def find_active_in_range(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        """Non-cancelled appointments whose interval intersects [start, end)."""
        ...

    def find_future_by_provider_and_day(
        self,
        provider_id: str,
        day_of_week: int,
        now: datetime,
    ) -> list[Appointment]:
        ...

    def exists_by_service_id(self, service_id: str) -> bool:
        ...


class AvailabilityRepository(Protocol):
    def save(self, availability: Availability) -> None:
        ...

    def find_by_id(self, availability_id: str) -> Availability | None:
        ...

    def find_by_provider_id(self, provider_id: str) -> list[Availability]:
        ...

    def find_by_provider_id_and_day(self, provider_id: str, day_of_week: int) -> Availability | None:
        ...

    def find_active_by_provider_id(self, provider_id: str) -> list[Availability]:
        ...

    def delete(self, availability_id: str) -> None:
        ...


class CustomerRepository(Protocol):
    def save(self, customer: Customer) -> None:
        """Insert or update. Inserts raise DuplicateCustomerError on a provider+email clash."""
        ...

    def find_by_id(self, customer_id: str) -> Customer | None:
        ...

    def find_by_email_and_provider(self, email: str, provider_id: str) -> Customer | None:
        ...

    def find_by_phone_and_provider(self, phone: str, provider_id: str) -> Customer | None:
        ...

    def find_by_provider(self, provider_id: str) -> list[Customer]:
        ...


class ServiceRepository(Protocol):
    def find_by_id(self, service_id: str) -> Service | None:
        ...

    def find_active_by_provider_id(self, provider_id: str) -> list[Service]:
        ...


class ProviderRepository(Protocol):
    def find_by_id(self, provider_id: str) -> Provider | None:
        ...

    def find_by_slug(self, slug: str) -> Provider | None:
        ...
