from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel

from agenda.auth.dependencies import get_current_provider_id
from agenda.core.clock import Clock
from agenda.domain.availability import Availability
from agenda.routes.dependencies import Repositories, get_clock, get_repositories
from agenda.routes.errors import request_transaction
from agenda.routes.schemas import AvailabilityResponse, TimeSlotSchema
from agenda.use_cases.availability import (
    delete_availability,
    find_availability_for_day,
    get_availability,
    set_availability,
    set_availability_active,
)

router = APIRouter(tags=['availability'])


class SetAvailabilityRequest(BaseModel):
    day_of_week: int
    slots: list[TimeSlotSchema]


def to_response(availability: Availability) -> AvailabilityResponse:
    return AvailabilityResponse(
        id=availability.id,
        provider_id=availability.provider_id,
        day_of_week=availability.day_of_week,
        day_name=availability.day_name(),
        slots=[TimeSlotSchema(start=slot.start, end=slot.end) for slot in availability.slots],
        is_active=availability.is_active,
        created_at=availability.created_at,
        updated_at=availability.updated_at,
    )


@router.get('', response_model=list[AvailabilityResponse])
def list_provider_availability(
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
):
    with request_transaction(repos.db):
        availabilities = get_availability(provider_id, providers=repos.providers, availabilities=repos.availabilities)

    return [to_response(availability) for availability in availabilities]


@router.post('', response_model=AvailabilityResponse)
def set_provider_availability(
    data: SetAvailabilityRequest,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        availability = set_availability(
            provider_id,
            data.day_of_week,
            [slot.model_dump() for slot in data.slots],
            providers=repos.providers,
            availabilities=repos.availabilities,
            clock=clock,
        )

    return to_response(availability)


@router.patch('/{day_of_week}/activate', response_model=AvailabilityResponse)
def activate_provider_availability(
    day_of_week: int = Path(...),
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        availability = set_availability_active(
            provider_id, day_of_week, True, availabilities=repos.availabilities, clock=clock
        )

    return to_response(availability)


@router.patch('/{day_of_week}/deactivate', response_model=AvailabilityResponse)
def deactivate_provider_availability(
    day_of_week: int = Path(...),
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        availability = set_availability_active(
            provider_id, day_of_week, False, availabilities=repos.availabilities, clock=clock
        )

    return to_response(availability)


@router.delete('/{day_of_week}', status_code=status.HTTP_204_NO_CONTENT)
def delete_provider_availability(
    day_of_week: int = Path(...),
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        availability = find_availability_for_day(provider_id, day_of_week, availabilities=repos.availabilities)
        delete_availability(
            availability.id,
            provider_id,
            availabilities=repos.availabilities,
            appointments=repos.appointments,
            clock=clock,
        )
