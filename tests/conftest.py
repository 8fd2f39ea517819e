import os
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-that-is-long-enough-for-hs256')

from agenda.core.clock import FixedClock  # noqa: E402
from agenda.database import Base, build_engine  # noqa: E402
from agenda.domain.appointment import Appointment  # noqa: E402
from agenda.domain.availability import Availability, day_of_week_for  # noqa: E402
from agenda.domain.customer import Customer  # noqa: E402
from agenda.domain.service import Provider, Service  # noqa: E402
from agenda.models import appointment, availability, customer, service, user  # noqa: E402,F401
from agenda.models.service import Service as ServiceModel  # noqa: E402
from agenda.models.user import User  # noqa: E402
from agenda.repositories.interfaces import AppointmentOverlapError  # noqa: E402
from agenda.scheduling.overlap import find_overlapping_appointment  # noqa: E402

PROVIDER_ID = 'provider-1'
OTHER_PROVIDER_ID = 'provider-2'
SERVICE_ID = 'service-60'

# Monday 2026-01-05 08:00 UTC
NOW = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


class InMemoryAppointmentRepository:
    def __init__(self) -> None:
        self.items: dict[str, Appointment] = {}

    def save(self, appointment: Appointment) -> None:
        if appointment.id not in self.items and not appointment.is_cancelled:
            if self.find_overlapping(appointment.provider_id, appointment.starts_at, appointment.ends_at):
                raise AppointmentOverlapError(appointment.id)
        self.items[appointment.id] = appointment

    def find_by_id(self, appointment_id: str) -> Appointment | None:
        return self.items.get(appointment_id)

    def find_by_provider_id(self, provider_id: str) -> list[Appointment]:
        return [item for item in self.items.values() if item.provider_id == provider_id]

    def find_by_customer_id(self, customer_id: str) -> list[Appointment]:
        return [item for item in self.items.values() if item.customer_id == customer_id]

    def find_overlapping(self, provider_id, starts_at, ends_at, exclude_id=None):
        return find_overlapping_appointment(self.find_by_provider_id(provider_id), starts_at, ends_at, exclude_id)

    def find_by_provider_and_date_range(self, provider_id, start, end):
        return [item for item in self.find_by_provider_id(provider_id) if start <= item.starts_at <= end]

    def find_active_in_range(self, provider_id, start, end):
        return [
            item
            for item in self.find_by_provider_id(provider_id)
            if not item.is_cancelled and item.starts_at < end and start < item.ends_at
        ]

    def find_future_by_provider_and_day(self, provider_id, day_of_week, now):
        return [
            item
            for item in self.find_by_provider_id(provider_id)
            if not item.is_cancelled and item.starts_at > now and day_of_week_for(item.starts_at) == day_of_week
        ]

    def exists_by_service_id(self, service_id: str) -> bool:
        return any(item.service_id == service_id for item in self.items.values())


class InMemoryAvailabilityRepository:
    def __init__(self) -> None:
        self.items: dict[str, Availability] = {}

    def save(self, availability: Availability) -> None:
        self.items[availability.id] = availability

    def find_by_id(self, availability_id: str) -> Availability | None:
        return self.items.get(availability_id)

    def find_by_provider_id(self, provider_id: str) -> list[Availability]:
        return [item for item in self.items.values() if item.provider_id == provider_id]

    def find_by_provider_id_and_day(self, provider_id: str, day_of_week: int) -> Availability | None:
        for item in self.find_by_provider_id(provider_id):
            if item.day_of_week == day_of_week:
                return item
        return None

    def find_active_by_provider_id(self, provider_id: str) -> list[Availability]:
        return [item for item in self.find_by_provider_id(provider_id) if item.is_active]

    def delete(self, availability_id: str) -> None:
        self.items.pop(availability_id, None)


class InMemoryCustomerRepository:
    def __init__(self) -> None:
        self.items: dict[str, Customer] = {}

    def save(self, customer: Customer) -> None:
        self.items[customer.id] = customer

    def find_by_id(self, customer_id: str) -> Customer | None:
        return self.items.get(customer_id)

    def find_by_email_and_provider(self, email: str, provider_id: str) -> Customer | None:
        for item in self.items.values():
            if item.email == email.strip().lower() and item.provider_id == provider_id:
                return item
        return None

    def find_by_phone_and_provider(self, phone: str, provider_id: str) -> Customer | None:
        for item in self.items.values():
            if item.phone == phone and item.provider_id == provider_id:
                return item
        return None

    def find_by_provider(self, provider_id: str) -> list[Customer]:
        return sorted(
            (item for item in self.items.values() if item.provider_id == provider_id),
            key=lambda item: item.name,
        )


class InMemoryServiceRepository:
    def __init__(self, services: list[Service]) -> None:
        self.items = {item.id: item for item in services}

    def find_by_id(self, service_id: str) -> Service | None:
        return self.items.get(service_id)

    def find_active_by_provider_id(self, provider_id: str) -> list[Service]:
        return [item for item in self.items.values() if item.provider_id == provider_id and item.is_active]


class InMemoryProviderRepository:
    def __init__(self, providers: list[Provider]) -> None:
        self.items = {item.id: item for item in providers}

    def find_by_id(self, provider_id: str) -> Provider | None:
        return self.items.get(provider_id)

    def find_by_slug(self, slug: str) -> Provider | None:
        for item in self.items.values():
            if item.slug == slug:
                return item
        return None


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def appointments() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository()


@pytest.fixture
def availabilities() -> InMemoryAvailabilityRepository:
    return InMemoryAvailabilityRepository()


@pytest.fixture
def customers() -> InMemoryCustomerRepository:
    return InMemoryCustomerRepository()


@pytest.fixture
def services() -> InMemoryServiceRepository:
    return InMemoryServiceRepository([
        Service(id=SERVICE_ID, provider_id=PROVIDER_ID, name='Haircut', duration_in_minutes=60, price_in_cents=5000),
        Service(id='service-30', provider_id=PROVIDER_ID, name='Trim', duration_in_minutes=30),
        Service(id='service-inactive', provider_id=PROVIDER_ID, name='Old', duration_in_minutes=30, is_active=False),
        Service(id='service-other', provider_id=OTHER_PROVIDER_ID, name='Massage', duration_in_minutes=60),
    ])


@pytest.fixture
def providers() -> InMemoryProviderRepository:
    return InMemoryProviderRepository([
        Provider(id=PROVIDER_ID, name='Ana', email='ana@example.com', slug='ana-studio', business_name='Ana Studio'),
        Provider(id=OTHER_PROVIDER_ID, name='Bia', email='bia@example.com', slug='bia-spa', business_name='Bia Spa'),
    ])


def seed_provider_rows(db) -> None:
    db.add_all([
        User(id=PROVIDER_ID, name='Ana', email='ana@example.com', slug='ana-studio', business_name='Ana Studio', created_at=NOW),
        User(id=OTHER_PROVIDER_ID, name='Bia', email='bia@example.com', slug='bia-spa', business_name='Bia Spa', created_at=NOW),
        ServiceModel(id=SERVICE_ID, provider_id=PROVIDER_ID, name='Haircut', duration_in_minutes=60, price_in_cents=5000, is_active=True, created_at=NOW, updated_at=NOW),
        ServiceModel(id='service-other', provider_id=OTHER_PROVIDER_ID, name='Massage', duration_in_minutes=60, price_in_cents=0, is_active=True, created_at=NOW, updated_at=NOW),
    ])
    db.commit()


@pytest.fixture
def db_session():
    engine = build_engine('sqlite:///:memory:')
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = session_local()
    seed_provider_rows(db)
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
