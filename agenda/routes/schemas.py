from datetime import datetime

from pydantic import BaseModel

from agenda.domain.appointment import AppointmentStatus, CancellationActor


class TimeSlotSchema(BaseModel):
    start: str
    end: str

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: str
    customer_id: str
    service_id: str
    provider_id: str
    starts_at: datetime
    ends_at: datetime
    duration_in_minutes: int
    status: AppointmentStatus
    observation: str | None = None
    cancel_reason: str | None = None
    canceled_by: CancellationActor | None = None
    canceled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    id: str
    provider_id: str
    day_of_week: int
    day_name: str
    slots: list[TimeSlotSchema]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    duration_in_minutes: int
    price_in_cents: int

    class Config:
        from_attributes = True


class CustomerResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    created_at: datetime

    class Config:
        from_attributes = True
