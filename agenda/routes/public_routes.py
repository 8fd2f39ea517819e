from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from agenda.core.clock import Clock, ensure_utc
from agenda.core.errors import NotFoundError
from agenda.domain.service import Provider
from agenda.routes.dependencies import Repositories, get_clock, get_repositories
from agenda.routes.errors import request_transaction
from agenda.routes.schemas import AppointmentResponse, ServiceResponse
from agenda.use_cases.appointments import BookingRequest, create_appointment, fetch_available_slots

router = APIRouter(tags=['public'])

MIN_CUSTOMER_NAME_LENGTH = 2
MAX_CUSTOMER_NAME_LENGTH = 50
MAX_OBSERVATION_LENGTH = 500


class PublicScheduleRequest(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: str
    service_id: str
    starts_at: datetime
    ends_at: datetime
    observation: str | None = None

    @field_validator('customer_name')
    @classmethod
    def validate_customer_name(cls, value: str) -> str:
        normalized = value.strip()
        if not MIN_CUSTOMER_NAME_LENGTH <= len(normalized) <= MAX_CUSTOMER_NAME_LENGTH:
            raise ValueError(
                f'Name must have between {MIN_CUSTOMER_NAME_LENGTH} and {MAX_CUSTOMER_NAME_LENGTH} characters.'
            )
        return normalized

    @field_validator('customer_email')
    @classmethod
    def validate_customer_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Customer email is required.')
        return normalized

    @field_validator('customer_phone')
    @classmethod
    def validate_customer_phone(cls, value: str) -> str:
        digits = ''.join(character for character in value if character.isdigit())
        if not 10 <= len(digits) <= 15:
            raise ValueError('Invalid phone number.')
        return digits

    @field_validator('starts_at', 'ends_at')
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator('observation')
    @classmethod
    def validate_observation(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_OBSERVATION_LENGTH:
            raise ValueError(f'Observation must be {MAX_OBSERVATION_LENGTH} characters or fewer.')

        return normalized


class PublicProviderProfileResponse(BaseModel):
    slug: str
    business_name: str
    name: str
    phone: str | None = None
    services: list[ServiceResponse]


class AvailableSlotsResponse(BaseModel):
    date: date
    slots: list[str]


def get_provider_by_slug(slug: str, repos: Repositories) -> Provider:
    provider = repos.providers.find_by_slug(slug)
    if provider is None:
        raise NotFoundError('Provider not found', 'PROVIDER_NOT_FOUND')
    return provider


@router.get('/{slug}', response_model=PublicProviderProfileResponse)
def get_provider_profile(slug: str, repos: Repositories = Depends(get_repositories)):
    with request_transaction(repos.db):
        provider = get_provider_by_slug(slug, repos)
        services = repos.services.find_active_by_provider_id(provider.id)

    return PublicProviderProfileResponse(
        slug=provider.slug,
        business_name=provider.business_name,
        name=provider.name,
        phone=provider.phone,
        services=[ServiceResponse.model_validate(service) for service in services],
    )


@router.get('/{slug}/slots', response_model=AvailableSlotsResponse)
def get_available_slots(
    slug: str,
    day: date = Query(..., alias='date'),
    service_id: str = Query(...),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        provider = get_provider_by_slug(slug, repos)
        slots = fetch_available_slots(
            provider.id,
            service_id,
            day,
            providers=repos.providers,
            services=repos.services,
            availabilities=repos.availabilities,
            appointments=repos.appointments,
            clock=clock,
        )

    return AvailableSlotsResponse(date=day, slots=slots)


@router.post('/{slug}/schedule', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def schedule_appointment(
    slug: str,
    data: PublicScheduleRequest,
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        provider = get_provider_by_slug(slug, repos)
        appointment = create_appointment(
            BookingRequest(
                customer_name=data.customer_name,
                customer_email=data.customer_email,
                customer_phone=data.customer_phone,
                provider_id=provider.id,
                service_id=data.service_id,
                starts_at=data.starts_at,
                ends_at=data.ends_at,
                observation=data.observation,
            ),
            appointments=repos.appointments,
            customers=repos.customers,
            services=repos.services,
            clock=clock,
        )

    return AppointmentResponse.model_validate(appointment)
