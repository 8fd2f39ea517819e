import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agenda.core.clock import ensure_utc
from agenda.domain.appointment import Appointment, AppointmentStatus
from agenda.domain.availability import day_of_week_for
from agenda.models.appointment import Appointment as AppointmentModel
from agenda.models.user import User
from agenda.repositories.interfaces import AppointmentOverlapError

logger = logging.getLogger(__name__)

CANCELLED = AppointmentStatus.CANCELLED.value


def _as_utc(value: datetime | None) -> datetime | None:
    return ensure_utc(value) if value is not None else None


def to_domain(row: AppointmentModel) -> Appointment:
    return Appointment(
        id=row.id,
        customer_id=row.customer_id,
        service_id=row.service_id,
        provider_id=row.provider_id,
        starts_at=_as_utc(row.starts_at),
        ends_at=_as_utc(row.ends_at),
        status=row.status,
        observation=row.observation,
        cancel_reason=row.cancel_reason,
        canceled_by=row.canceled_by,
        canceled_at=_as_utc(row.canceled_at),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _copy_to_row(appointment: Appointment, row: AppointmentModel) -> None:
    row.customer_id = appointment.customer_id
    row.service_id = appointment.service_id
    row.provider_id = appointment.provider_id
    row.starts_at = appointment.starts_at
    row.ends_at = appointment.ends_at
    row.status = appointment.status.value
    row.observation = appointment.observation
    row.cancel_reason = appointment.cancel_reason
    row.canceled_by = appointment.canceled_by.value if appointment.canceled_by else None
    row.canceled_at = appointment.canceled_at
    row.created_at = appointment.created_at
    row.updated_at = appointment.updated_at


class SqlAlchemyAppointmentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, appointment: Appointment) -> None:
        row = self.db.get(AppointmentModel, appointment.id)

        if row is not None:
            _copy_to_row(appointment, row)
            self.db.flush()
            return

        # Last gate before the insert: lock the provider, then re-check.
        self._lock_provider(appointment.provider_id)
        if not appointment.is_cancelled:
            overlapping = self.find_overlapping(appointment.provider_id, appointment.starts_at, appointment.ends_at)
            if overlapping is not None:
                logger.warning(
                    'Write-time overlap for provider %s: %s conflicts with %s',
                    appointment.provider_id,
                    appointment.id,
                    overlapping.id,
                )
                raise AppointmentOverlapError(overlapping.id)

        row = AppointmentModel(id=appointment.id)
        _copy_to_row(appointment, row)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise AppointmentOverlapError(appointment.id) from exc

    def _lock_provider(self, provider_id: str) -> None:
        # FOR UPDATE is a no-op on SQLite, where BEGIN IMMEDIATE already serializes writers.
        self.db.query(User.id).filter(User.id == provider_id).with_for_update().first()

    def find_by_id(self, appointment_id: str) -> Appointment | None:
        row = self.db.get(AppointmentModel, appointment_id)
        return to_domain(row) if row is not None else None

    def find_by_provider_id(self, provider_id: str) -> list[Appointment]:
        rows = self.db.query(AppointmentModel).filter(
            AppointmentModel.provider_id == provider_id,
        ).order_by(AppointmentModel.starts_at.desc()).all()
        return [to_domain(row) for row in rows]

    def find_by_customer_id(self, customer_id: str) -> list[Appointment]:
        rows = self.db.query(AppointmentModel).filter(
            AppointmentModel.customer_id == customer_id,
        ).order_by(AppointmentModel.starts_at.desc()).all()
        return [to_domain(row) for row in rows]

    def find_overlapping(
        self,
        provider_id: str,
        starts_at: datetime,
        ends_at: datetime,
        exclude_id: str | None = None,
    ) -> Appointment | None:
        query = self.db.query(AppointmentModel).filter(
            AppointmentModel.provider_id == provider_id,
            AppointmentModel.status != CANCELLED,
            AppointmentModel.starts_at < ends_at,
            AppointmentModel.ends_at > starts_at,
        )
        if exclude_id:
            query = query.filter(AppointmentModel.id != exclude_id)

        row = query.order_by(AppointmentModel.starts_at.asc()).first()
        return to_domain(row) if row is not None else None

    def find_by_provider_and_date_range(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        rows = self.db.query(AppointmentModel).filter(
            AppointmentModel.provider_id == provider_id,
            AppointmentModel.starts_at >= start,
            AppointmentModel.starts_at <= end,
        ).order_by(AppointmentModel.starts_at.asc()).all()
        return [to_domain(row) for row in rows]

    def find_active_in_range(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        rows = self.db.query(AppointmentModel).filter(
            AppointmentModel.provider_id == provider_id,
            AppointmentModel.status != CANCELLED,
            AppointmentModel.starts_at < end,
            AppointmentModel.ends_at > start,
        ).order_by(AppointmentModel.starts_at.asc()).all()
        return [to_domain(row) for row in rows]

    def find_future_by_provider_and_day(
        self,
        provider_id: str,
        day_of_week: int,
        now: datetime,
    ) -> list[Appointment]:
        rows = self.db.query(AppointmentModel).filter(
            AppointmentModel.provider_id == provider_id,
            AppointmentModel.status != CANCELLED,
            AppointmentModel.starts_at > now,
        ).order_by(AppointmentModel.starts_at.asc()).all()
        appointments = [to_domain(row) for row in rows]
        return [appointment for appointment in appointments if day_of_week_for(appointment.starts_at) == day_of_week]

    def exists_by_service_id(self, service_id: str) -> bool:
        return self.db.query(AppointmentModel.id).filter(
            AppointmentModel.service_id == service_id,
        ).first() is not None
