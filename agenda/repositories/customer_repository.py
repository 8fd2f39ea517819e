import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agenda.core.clock import ensure_utc
from agenda.domain.customer import Customer
from agenda.models.customer import Customer as CustomerModel
from agenda.repositories.interfaces import DuplicateCustomerError

logger = logging.getLogger(__name__)


def to_domain(row: CustomerModel) -> Customer:
    return Customer(
        id=row.id,
        provider_id=row.provider_id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _copy_to_row(customer: Customer, row: CustomerModel) -> None:
    row.name = customer.name
    row.email = customer.email
    row.phone = customer.phone
    row.created_at = customer.created_at
    row.updated_at = customer.updated_at


class SqlAlchemyCustomerRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, customer: Customer) -> None:
        row = self.db.get(CustomerModel, customer.id)
        if row is not None:
            _copy_to_row(customer, row)
            self.db.flush()
            return

        row = CustomerModel(id=customer.id, provider_id=customer.provider_id)
        _copy_to_row(customer, row)
        # A provider+email clash rolls back only this savepoint.
        try:
            with self.db.begin_nested():
                self.db.add(row)
        except IntegrityError as exc:
            logger.info('Customer %s already exists for provider %s', customer.email, customer.provider_id)
            raise DuplicateCustomerError(customer.email) from exc

    def find_by_id(self, customer_id: str) -> Customer | None:
        row = self.db.get(CustomerModel, customer_id)
        return to_domain(row) if row is not None else None

    def find_by_email_and_provider(self, email: str, provider_id: str) -> Customer | None:
        row = self.db.query(CustomerModel).filter(
            CustomerModel.email == email.strip().lower(),
            CustomerModel.provider_id == provider_id,
        ).first()
        return to_domain(row) if row is not None else None

    def find_by_phone_and_provider(self, phone: str, provider_id: str) -> Customer | None:
        row = self.db.query(CustomerModel).filter(
            CustomerModel.phone == re.sub(r'\D', '', phone),
            CustomerModel.provider_id == provider_id,
        ).first()
        return to_domain(row) if row is not None else None

    def find_by_provider(self, provider_id: str) -> list[Customer]:
        rows = self.db.query(CustomerModel).filter(
            CustomerModel.provider_id == provider_id,
        ).order_by(CustomerModel.name.asc()).all()
        return [to_domain(row) for row in rows]
