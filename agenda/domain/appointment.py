"""Appointment aggregate and its booking state machine.

PENDING -> CONFIRMED -> COMPLETED | NO_SHOW, and anything except CANCELLED
or COMPLETED -> CANCELLED. CANCELLED and COMPLETED are absorbing.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from agenda.core.clock import ensure_utc
from agenda.core.errors import BusinessRuleError, ValidationError

MIN_APPOINTMENT_DURATION = timedelta(minutes=15)


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


class CancellationActor(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    PROVIDER = "PROVIDER"
    SYSTEM = "SYSTEM"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Appointment:
    customer_id: str
    service_id: str
    provider_id: str
    starts_at: datetime
    ends_at: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    observation: str | None = None
    cancel_reason: str | None = None
    canceled_by: CancellationActor | None = None
    canceled_at: datetime | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.starts_at = ensure_utc(self.starts_at)
        self.ends_at = ensure_utc(self.ends_at)
        self.status = AppointmentStatus(self.status)
        if self.canceled_by is not None:
            self.canceled_by = CancellationActor(self.canceled_by)

        if self.ends_at <= self.starts_at:
            raise ValidationError('End time must be after start time', 'APPOINTMENT_INVALID_TIME_RANGE')
        if self.ends_at - self.starts_at < MIN_APPOINTMENT_DURATION:
            raise ValidationError(
                'Appointment duration must be at least 15 minutes',
                'APPOINTMENT_MIN_DURATION',
            )

    @classmethod
    def schedule(
        cls,
        *,
        customer_id: str,
        service_id: str,
        provider_id: str,
        starts_at: datetime,
        ends_at: datetime,
        now: datetime,
        observation: str | None = None,
    ) -> 'Appointment':
        """Create a new PENDING appointment, refusing start times in the past."""
        if ensure_utc(starts_at) < ensure_utc(now):
            raise ValidationError('Cannot schedule appointments in the past', 'APPOINTMENT_PAST_DATE')

        return cls(
            customer_id=customer_id,
            service_id=service_id,
            provider_id=provider_id,
            starts_at=starts_at,
            ends_at=ends_at,
            observation=observation,
            created_at=now,
            updated_at=now,
        )

    @property
    def duration_in_minutes(self) -> int:
        return int((self.ends_at - self.starts_at).total_seconds() // 60)

    @property
    def is_cancelled(self) -> bool:
        return self.status is AppointmentStatus.CANCELLED

    def overlaps(self, starts_at: datetime, ends_at: datetime) -> bool:
        return self.starts_at < ensure_utc(ends_at) and ensure_utc(starts_at) < self.ends_at

    def confirm(self, at: datetime | None = None) -> None:
        if self.status is not AppointmentStatus.PENDING:
            raise BusinessRuleError('Only pending appointments can be confirmed', 'APPOINTMENT_NOT_PENDING')
        self.status = AppointmentStatus.CONFIRMED
        self.updated_at = at or _utcnow()

    def complete(self, at: datetime | None = None) -> None:
        if self.status is not AppointmentStatus.CONFIRMED:
            raise BusinessRuleError('Only confirmed appointments can be completed', 'APPOINTMENT_NOT_CONFIRMED')
        self.status = AppointmentStatus.COMPLETED
        self.updated_at = at or _utcnow()

    def mark_as_no_show(self, at: datetime | None = None) -> None:
        if self.status is not AppointmentStatus.CONFIRMED:
            raise BusinessRuleError(
                'Only confirmed appointments can be marked as no-show',
                'APPOINTMENT_NOT_CONFIRMED',
            )
        self.status = AppointmentStatus.NO_SHOW
        self.updated_at = at or _utcnow()

    def cancel(self, reason: str, actor: CancellationActor, at: datetime | None = None) -> None:
        if self.status is AppointmentStatus.CANCELLED:
            raise BusinessRuleError('Appointment is already cancelled', 'APPOINTMENT_ALREADY_CANCELLED')
        if self.status is AppointmentStatus.COMPLETED:
            raise BusinessRuleError('Cannot cancel a completed appointment', 'APPOINTMENT_ALREADY_COMPLETED')

        at = at or _utcnow()
        self.status = AppointmentStatus.CANCELLED
        self.cancel_reason = reason
        self.canceled_by = CancellationActor(actor)
        self.canceled_at = at
        self.updated_at = at

    def ensure_owned_by(self, provider_id: str, code: str = 'APPOINTMENT_ACCESS_FORBIDDEN') -> None:
        if self.provider_id != provider_id:
            raise BusinessRuleError('You do not have permission to modify this appointment', code)
