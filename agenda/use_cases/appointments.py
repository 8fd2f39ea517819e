"""Booking and appointment lifecycle operations."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from agenda.core.clock import Clock, ensure_utc
from agenda.core.errors import BusinessRuleError, NotFoundError
from agenda.domain.appointment import Appointment, AppointmentStatus, CancellationActor
from agenda.domain.availability import day_of_week_for
from agenda.domain.customer import Customer, normalize_email
from agenda.domain.service import Service
from agenda.repositories.interfaces import (
    AppointmentOverlapError,
    AppointmentRepository,
    AvailabilityRepository,
    CustomerRepository,
    DuplicateCustomerError,
    ProviderRepository,
    ServiceRepository,
)
from agenda.scheduling.overlap import day_bounds, filter_future_slots, filter_occupied_slots
from agenda.scheduling.slots import generate_all_slots

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    customer_name: str
    customer_email: str
    customer_phone: str
    provider_id: str
    service_id: str
    starts_at: datetime
    ends_at: datetime
    observation: str | None = None


def _conflict() -> BusinessRuleError:
    return BusinessRuleError('Time slot is already booked', 'APPOINTMENT_CONFLICT')


def _get_bookable_service(services: ServiceRepository, service_id: str, provider_id: str) -> Service:
    service = services.find_by_id(service_id)
    if service is None:
        raise NotFoundError('Service not found', 'SERVICE_NOT_FOUND')
    if service.provider_id != provider_id:
        raise BusinessRuleError('Service does not belong to this provider', 'SERVICE_PROVIDER_MISMATCH')
    if not service.is_active:
        raise BusinessRuleError('Service is not active', 'SERVICE_INACTIVE')
    return service


def _get_appointment(appointments: AppointmentRepository, appointment_id: str) -> Appointment:
    appointment = appointments.find_by_id(appointment_id)
    if appointment is None:
        raise NotFoundError('Appointment not found', 'APPOINTMENT_NOT_FOUND')
    return appointment


def _ensure_provider_exists(providers: ProviderRepository, provider_id: str) -> None:
    if providers.find_by_id(provider_id) is None:
        raise NotFoundError('Provider not found', 'PROVIDER_NOT_FOUND')


def fetch_available_slots(
    provider_id: str,
    service_id: str,
    day: date,
    *,
    providers: ProviderRepository,
    services: ServiceRepository,
    availabilities: AvailabilityRepository,
    appointments: AppointmentRepository,
    clock: Clock,
) -> list[str]:
    _ensure_provider_exists(providers, provider_id)
    service = _get_bookable_service(services, service_id, provider_id)

    availability = availabilities.find_by_provider_id_and_day(provider_id, day_of_week_for(day))
    if availability is None or not availability.is_active:
        return []

    # Appointments running over midnight still occupy the start of this day.
    start_of_day, _ = day_bounds(day)
    existing = appointments.find_active_in_range(provider_id, start_of_day, start_of_day + timedelta(days=1))

    candidates = generate_all_slots(availability.slots, service.duration_in_minutes)
    free = filter_occupied_slots(candidates, existing, day, service.duration_in_minutes)
    return sorted(filter_future_slots(free, day, clock.now()))


def create_appointment(
    request: BookingRequest,
    *,
    appointments: AppointmentRepository,
    customers: CustomerRepository,
    services: ServiceRepository,
    clock: Clock,
) -> Appointment:
    """Book a PENDING appointment for a (possibly new) customer.

    Nothing is written unless the appointment itself is written: the new
    customer is only saved once every check has passed.
    """
    now = clock.now()
    starts_at = ensure_utc(request.starts_at)
    ends_at = ensure_utc(request.ends_at)

    customer = customers.find_by_email_and_provider(normalize_email(request.customer_email), request.provider_id)
    is_new_customer = customer is None
    if is_new_customer:
        customer = Customer(
            name=request.customer_name,
            email=request.customer_email,
            phone=request.customer_phone,
            provider_id=request.provider_id,
            created_at=now,
            updated_at=now,
        )

    _get_bookable_service(services, request.service_id, request.provider_id)

    if appointments.find_overlapping(request.provider_id, starts_at, ends_at) is not None:
        logger.info('Booking rejected for provider %s at %s: slot taken', request.provider_id, starts_at.isoformat())
        raise _conflict()

    appointment = Appointment.schedule(
        customer_id=customer.id,
        service_id=request.service_id,
        provider_id=request.provider_id,
        starts_at=starts_at,
        ends_at=ends_at,
        observation=request.observation,
        now=now,
    )

    if is_new_customer:
        try:
            customers.save(customer)
        except DuplicateCustomerError:
            existing = customers.find_by_email_and_provider(customer.email, request.provider_id)
            if existing is None:
                raise
            logger.info('Reusing customer %s created by a concurrent booking', existing.id)
            appointment.customer_id = existing.id

    try:
        appointments.save(appointment)
    except AppointmentOverlapError as exc:
        logger.warning('Booking for provider %s at %s lost a write race', request.provider_id, starts_at.isoformat())
        raise _conflict() from exc

    logger.info('Booked appointment %s for provider %s at %s', appointment.id, appointment.provider_id, starts_at.isoformat())
    return appointment


def confirm_appointment(
    appointment_id: str,
    provider_id: str,
    *,
    appointments: AppointmentRepository,
    clock: Clock,
) -> Appointment:
    appointment = _get_appointment(appointments, appointment_id)
    appointment.ensure_owned_by(provider_id, 'APPOINTMENT_CONFIRM_FORBIDDEN')
    appointment.confirm(at=clock.now())
    appointments.save(appointment)
    logger.info('Appointment %s confirmed', appointment.id)
    return appointment


def complete_appointment(
    appointment_id: str,
    provider_id: str,
    *,
    appointments: AppointmentRepository,
    clock: Clock,
) -> Appointment:
    appointment = _get_appointment(appointments, appointment_id)
    appointment.ensure_owned_by(provider_id, 'APPOINTMENT_COMPLETE_FORBIDDEN')
    appointment.complete(at=clock.now())
    appointments.save(appointment)
    logger.info('Appointment %s completed', appointment.id)
    return appointment


def mark_appointment_no_show(
    appointment_id: str,
    provider_id: str,
    *,
    appointments: AppointmentRepository,
    clock: Clock,
) -> Appointment:
    appointment = _get_appointment(appointments, appointment_id)
    appointment.ensure_owned_by(provider_id, 'APPOINTMENT_NO_SHOW_FORBIDDEN')
    appointment.mark_as_no_show(at=clock.now())
    appointments.save(appointment)
    logger.info('Appointment %s marked as no-show', appointment.id)
    return appointment


def cancel_appointment(
    appointment_id: str,
    reason: str,
    canceled_by: CancellationActor,
    actor_id: str,
    *,
    appointments: AppointmentRepository,
    clock: Clock,
) -> Appointment:
    appointment = _get_appointment(appointments, appointment_id)
    canceled_by = CancellationActor(canceled_by)

    if canceled_by is CancellationActor.PROVIDER and appointment.provider_id != actor_id:
        raise BusinessRuleError('You do not have permission to cancel this appointment', 'APPOINTMENT_CANCEL_FORBIDDEN')
    if canceled_by is CancellationActor.CUSTOMER and appointment.customer_id != actor_id:
        raise BusinessRuleError('You do not have permission to cancel this appointment', 'APPOINTMENT_CANCEL_FORBIDDEN')

    appointment.cancel(reason, canceled_by, at=clock.now())
    appointments.save(appointment)
    logger.info('Appointment %s cancelled by %s', appointment.id, canceled_by.value)
    return appointment


def list_appointments(
    provider_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    status: AppointmentStatus | None = None,
    *,
    providers: ProviderRepository,
    appointments: AppointmentRepository,
) -> list[Appointment]:
    _ensure_provider_exists(providers, provider_id)

    if start_date is not None and end_date is not None:
        found = appointments.find_by_provider_and_date_range(provider_id, ensure_utc(start_date), ensure_utc(end_date))
    else:
        found = appointments.find_by_provider_id(provider_id)

    if status is not None:
        status = AppointmentStatus(status)
        found = [appointment for appointment in found if appointment.status is status]

    return sorted(found, key=lambda appointment: appointment.starts_at)
