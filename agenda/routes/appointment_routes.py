from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from agenda.auth.dependencies import get_current_provider_id
from agenda.core.clock import Clock
from agenda.domain.appointment import AppointmentStatus, CancellationActor
from agenda.routes.dependencies import Repositories, get_clock, get_repositories
from agenda.routes.errors import request_transaction
from agenda.routes.schemas import AppointmentResponse
from agenda.use_cases.appointments import (
    cancel_appointment,
    complete_appointment,
    confirm_appointment,
    list_appointments,
    mark_appointment_no_show,
)

router = APIRouter(tags=['appointments'])

MIN_CANCEL_REASON_LENGTH = 10
MAX_CANCEL_REASON_LENGTH = 500


class CancelAppointmentRequest(BaseModel):
    reason: str

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        normalized = value.strip()
        if not MIN_CANCEL_REASON_LENGTH <= len(normalized) <= MAX_CANCEL_REASON_LENGTH:
            raise ValueError(
                f'Reason must have between {MIN_CANCEL_REASON_LENGTH} and {MAX_CANCEL_REASON_LENGTH} characters.'
            )
        return normalized


@router.get('', response_model=list[AppointmentResponse])
def list_provider_appointments(
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    status: AppointmentStatus | None = Query(default=None),
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
):
    with request_transaction(repos.db):
        appointments = list_appointments(
            provider_id,
            start_date,
            end_date,
            status,
            providers=repos.providers,
            appointments=repos.appointments,
        )

    return [AppointmentResponse.model_validate(appointment) for appointment in appointments]


@router.patch('/{appointment_id}/confirm', response_model=AppointmentResponse)
def confirm_provider_appointment(
    appointment_id: str,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        appointment = confirm_appointment(appointment_id, provider_id, appointments=repos.appointments, clock=clock)

    return AppointmentResponse.model_validate(appointment)


@router.patch('/{appointment_id}/complete', response_model=AppointmentResponse)
def complete_provider_appointment(
    appointment_id: str,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        appointment = complete_appointment(appointment_id, provider_id, appointments=repos.appointments, clock=clock)

    return AppointmentResponse.model_validate(appointment)


@router.patch('/{appointment_id}/no-show', response_model=AppointmentResponse)
def mark_provider_appointment_no_show(
    appointment_id: str,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        appointment = mark_appointment_no_show(appointment_id, provider_id, appointments=repos.appointments, clock=clock)

    return AppointmentResponse.model_validate(appointment)


@router.patch('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_provider_appointment(
    appointment_id: str,
    data: CancelAppointmentRequest,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        appointment = cancel_appointment(
            appointment_id,
            data.reason,
            CancellationActor.PROVIDER,
            provider_id,
            appointments=repos.appointments,
            clock=clock,
        )

    return AppointmentResponse.model_validate(appointment)
