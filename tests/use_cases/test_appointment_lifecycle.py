from datetime import datetime, timedelta, timezone

import pytest

from conftest import OTHER_PROVIDER_ID, PROVIDER_ID, SERVICE_ID
from agenda.core.errors import BusinessRuleError, NotFoundError
from agenda.domain.appointment import Appointment, AppointmentStatus, CancellationActor
from agenda.use_cases.appointments import (
    cancel_appointment,
    complete_appointment,
    confirm_appointment,
    list_appointments,
    mark_appointment_no_show,
)

START = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def pending(appointments) -> Appointment:
    appointment = Appointment(
        customer_id='customer-1',
        service_id=SERVICE_ID,
        provider_id=PROVIDER_ID,
        starts_at=START,
        ends_at=START + timedelta(hours=1),
    )
    appointments.save(appointment)
    return appointment


def test_confirm_then_complete(appointments, clock, pending) -> None:
    confirmed = confirm_appointment(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)
    assert confirmed.status is AppointmentStatus.CONFIRMED
    assert confirmed.updated_at == clock.now()

    clock.advance(hours=3)
    completed = complete_appointment(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)
    assert completed.status is AppointmentStatus.COMPLETED
    assert completed.updated_at == clock.now()


def test_confirm_then_no_show(appointments, clock, pending) -> None:
    confirm_appointment(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)

    appointment = mark_appointment_no_show(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)

    assert appointment.status is AppointmentStatus.NO_SHOW


def test_complete_pending_is_illegal(appointments, clock, pending) -> None:
    with pytest.raises(BusinessRuleError) as exception_info:
        complete_appointment(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)

    assert exception_info.value.code == 'APPOINTMENT_NOT_CONFIRMED'
    assert appointments.find_by_id(pending.id).status is AppointmentStatus.PENDING


@pytest.mark.parametrize(
    ('operation', 'code'),
    [
        (confirm_appointment, 'APPOINTMENT_CONFIRM_FORBIDDEN'),
        (complete_appointment, 'APPOINTMENT_COMPLETE_FORBIDDEN'),
        (mark_appointment_no_show, 'APPOINTMENT_NO_SHOW_FORBIDDEN'),
    ],
)
def test_other_provider_cannot_transition(appointments, clock, pending, operation, code: str) -> None:
    with pytest.raises(BusinessRuleError) as exception_info:
        operation(pending.id, OTHER_PROVIDER_ID, appointments=appointments, clock=clock)

    assert exception_info.value.code == code


def test_unknown_appointment_is_not_found(appointments, clock) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        confirm_appointment('missing', PROVIDER_ID, appointments=appointments, clock=clock)

    assert exception_info.value.code == 'APPOINTMENT_NOT_FOUND'


def test_provider_cancels_own_appointment(appointments, clock, pending) -> None:
    appointment = cancel_appointment(
        pending.id,
        'Provider is sick today',
        CancellationActor.PROVIDER,
        PROVIDER_ID,
        appointments=appointments,
        clock=clock,
    )

    assert appointment.status is AppointmentStatus.CANCELLED
    assert appointment.canceled_by is CancellationActor.PROVIDER
    assert appointment.canceled_at == clock.now()


def test_customer_cancels_own_appointment(appointments, clock, pending) -> None:
    appointment = cancel_appointment(
        pending.id,
        'Cannot make it anymore',
        'CUSTOMER',
        'customer-1',
        appointments=appointments,
        clock=clock,
    )

    assert appointment.canceled_by is CancellationActor.CUSTOMER


@pytest.mark.parametrize(
    ('actor', 'actor_id'),
    [
        (CancellationActor.PROVIDER, OTHER_PROVIDER_ID),
        (CancellationActor.CUSTOMER, 'customer-2'),
    ],
)
def test_cancel_checks_permission_before_state(appointments, clock, pending, actor, actor_id: str) -> None:
    pending.cancel('Already cancelled once', CancellationActor.SYSTEM)

    with pytest.raises(BusinessRuleError) as exception_info:
        cancel_appointment(pending.id, 'Trying again later', actor, actor_id, appointments=appointments, clock=clock)

    assert exception_info.value.code == 'APPOINTMENT_CANCEL_FORBIDDEN'


def test_system_cancellation_skips_ownership(appointments, clock, pending) -> None:
    appointment = cancel_appointment(
        pending.id,
        'Automatic expiry of booking',
        CancellationActor.SYSTEM,
        'scheduler',
        appointments=appointments,
        clock=clock,
    )

    assert appointment.canceled_by is CancellationActor.SYSTEM


def test_cancel_twice_is_rejected(appointments, clock, pending) -> None:
    cancel_appointment(pending.id, 'First cancellation', 'PROVIDER', PROVIDER_ID, appointments=appointments, clock=clock)

    with pytest.raises(BusinessRuleError) as exception_info:
        cancel_appointment(pending.id, 'Second cancellation', 'PROVIDER', PROVIDER_ID, appointments=appointments, clock=clock)

    assert exception_info.value.code == 'APPOINTMENT_ALREADY_CANCELLED'


def test_list_appointments_filters_by_range_and_status(appointments, providers, clock, pending) -> None:
    later = Appointment(
        customer_id='customer-2',
        service_id=SERVICE_ID,
        provider_id=PROVIDER_ID,
        starts_at=START + timedelta(days=1),
        ends_at=START + timedelta(days=1, hours=1),
        status=AppointmentStatus.CONFIRMED,
    )
    appointments.save(later)

    everything = list_appointments(PROVIDER_ID, providers=providers, appointments=appointments)
    assert [item.id for item in everything] == [pending.id, later.id]

    first_day = list_appointments(
        PROVIDER_ID,
        START - timedelta(hours=10),
        START + timedelta(hours=10),
        providers=providers,
        appointments=appointments,
    )
    assert [item.id for item in first_day] == [pending.id]

    confirmed = list_appointments(PROVIDER_ID, status='CONFIRMED', providers=providers, appointments=appointments)
    assert [item.id for item in confirmed] == [later.id]


def test_list_appointments_requires_known_provider(appointments, providers) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        list_appointments('ghost', providers=providers, appointments=appointments)

    assert exception_info.value.code == 'PROVIDER_NOT_FOUND'


def test_customer_cannot_cancel_someone_elses_confirmed_appointment(appointments, clock, pending) -> None:
    confirm_appointment(pending.id, PROVIDER_ID, appointments=appointments, clock=clock)
    confirmed_at = appointments.find_by_id(pending.id).updated_at
    clock.advance(minutes=10)

    with pytest.raises(BusinessRuleError) as exception_info:
        cancel_appointment(
            pending.id,
            'Trying to cancel a stranger',
            CancellationActor.CUSTOMER,
            'customer-2',
            appointments=appointments,
            clock=clock,
        )

    appointment = appointments.find_by_id(pending.id)
    assert exception_info.value.code == 'APPOINTMENT_CANCEL_FORBIDDEN'
    assert appointment.status is AppointmentStatus.CONFIRMED
    assert appointment.cancel_reason is None
    assert appointment.canceled_by is None
    assert appointment.updated_at == confirmed_at
