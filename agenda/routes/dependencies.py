from fastapi import Depends
from sqlalchemy.orm import Session

from agenda.core.clock import Clock, SystemClock
from agenda.database import get_db
from agenda.repositories.appointment_repository import SqlAlchemyAppointmentRepository
from agenda.repositories.availability_repository import SqlAlchemyAvailabilityRepository
from agenda.repositories.customer_repository import SqlAlchemyCustomerRepository
from agenda.repositories.provider_repository import SqlAlchemyProviderRepository, SqlAlchemyServiceRepository


def get_clock() -> Clock:
    return SystemClock()


class Repositories:
    """Request-scoped SQLAlchemy repositories sharing one session."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.appointments = SqlAlchemyAppointmentRepository(db)
        self.availabilities = SqlAlchemyAvailabilityRepository(db)
        self.customers = SqlAlchemyCustomerRepository(db)
        self.providers = SqlAlchemyProviderRepository(db)
        self.services = SqlAlchemyServiceRepository(db)


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    return Repositories(db)
