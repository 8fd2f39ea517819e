from agenda.core.clock import Clock
from agenda.core.errors import BusinessRuleError, NotFoundError, UnauthorizedError
from agenda.domain.customer import Customer, normalize_email
from agenda.repositories.interfaces import CustomerRepository


def list_provider_customers(provider_id: str, *, customers: CustomerRepository) -> list[Customer]:
    return customers.find_by_provider(provider_id)


def update_customer(
    customer_id: str,
    provider_id: str,
    name: str,
    email: str,
    phone: str,
    *,
    customers: CustomerRepository,
    clock: Clock,
) -> Customer:
    customer = customers.find_by_id(customer_id)
    if customer is None:
        raise NotFoundError('Customer not found', 'CUSTOMER_NOT_FOUND')

    if customer.provider_id != provider_id:
        raise UnauthorizedError('You do not have permission to update this customer', 'CUSTOMER_UPDATE_FORBIDDEN')

    existing = customers.find_by_email_and_provider(normalize_email(email), provider_id)
    if existing is not None and existing.id != customer.id:
        raise BusinessRuleError('Another customer already uses this email', 'CUSTOMER_EMAIL_TAKEN')

    customer.update_contact_info(name, email, phone, at=clock.now())
    customers.save(customer)
    return customer
