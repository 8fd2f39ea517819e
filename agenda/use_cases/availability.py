"""Provider weekly availability management."""

import logging
from typing import Any, Iterable, Mapping

from agenda.core.clock import Clock
from agenda.core.errors import BusinessRuleError, NotFoundError
from agenda.domain.availability import Availability, validate_day_of_week
from agenda.domain.time_slot import TimeSlot
from agenda.repositories.interfaces import AppointmentRepository, AvailabilityRepository, ProviderRepository

logger = logging.getLogger(__name__)


def _ensure_provider_exists(providers: ProviderRepository, provider_id: str) -> None:
    if providers.find_by_id(provider_id) is None:
        raise NotFoundError('Provider not found', 'PROVIDER_NOT_FOUND')


def set_availability(
    provider_id: str,
    day_of_week: int,
    slots: Iterable[TimeSlot | Mapping[str, Any]],
    *,
    providers: ProviderRepository,
    availabilities: AvailabilityRepository,
    clock: Clock,
) -> Availability:
    """Create or fully replace the provider's windows for one weekday."""
    _ensure_provider_exists(providers, provider_id)
    validate_day_of_week(day_of_week)
    now = clock.now()

    availability = availabilities.find_by_provider_id_and_day(provider_id, day_of_week)
    if availability is not None:
        availability.update_slots(slots, at=now)
    else:
        availability = Availability(
            provider_id=provider_id,
            day_of_week=day_of_week,
            slots=list(slots),
            created_at=now,
            updated_at=now,
        )

    availabilities.save(availability)
    logger.info('Availability for provider %s on %s set to %d window(s)', provider_id, availability.day_name(), len(availability.slots))
    return availability


def get_availability(
    provider_id: str,
    *,
    providers: ProviderRepository,
    availabilities: AvailabilityRepository,
) -> list[Availability]:
    _ensure_provider_exists(providers, provider_id)
    return sorted(availabilities.find_by_provider_id(provider_id), key=lambda availability: availability.day_of_week)


def find_availability_for_day(
    provider_id: str,
    day_of_week: int,
    *,
    availabilities: AvailabilityRepository,
) -> Availability:
    validate_day_of_week(day_of_week)
    availability = availabilities.find_by_provider_id_and_day(provider_id, day_of_week)
    if availability is None:
        raise NotFoundError('Availability not found for this day', 'AVAILABILITY_NOT_FOUND')
    return availability


def set_availability_active(
    provider_id: str,
    day_of_week: int,
    active: bool,
    *,
    availabilities: AvailabilityRepository,
    clock: Clock,
) -> Availability:
    availability = find_availability_for_day(provider_id, day_of_week, availabilities=availabilities)

    if active:
        availability.activate(at=clock.now())
    else:
        availability.deactivate(at=clock.now())

    availabilities.save(availability)
    return availability


def delete_availability(
    availability_id: str,
    provider_id: str,
    *,
    availabilities: AvailabilityRepository,
    appointments: AppointmentRepository,
    clock: Clock,
) -> None:
    availability = availabilities.find_by_id(availability_id)
    if availability is None:
        raise NotFoundError('Availability not found', 'AVAILABILITY_NOT_FOUND')

    if availability.provider_id != provider_id:
        raise BusinessRuleError(
            'You do not have permission to delete this availability',
            'AVAILABILITY_DELETE_FORBIDDEN',
        )

    upcoming = appointments.find_future_by_provider_and_day(provider_id, availability.day_of_week, clock.now())
    if upcoming:
        raise BusinessRuleError(
            'Cannot delete availability with future appointments',
            'AVAILABILITY_HAS_APPOINTMENTS',
        )

    availabilities.delete(availability_id)
    logger.info('Availability %s deleted for provider %s', availability_id, provider_id)
