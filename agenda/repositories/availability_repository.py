from sqlalchemy.orm import Session

from agenda.core.clock import ensure_utc
from agenda.domain.availability import Availability
from agenda.domain.time_slot import TimeSlot
from agenda.models.availability import Availability as AvailabilityModel


def to_domain(row: AvailabilityModel) -> Availability:
    return Availability(
        id=row.id,
        provider_id=row.provider_id,
        day_of_week=row.day_of_week,
        slots=[TimeSlot.from_dict(slot) for slot in row.slots or []],
        is_active=row.is_active,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class SqlAlchemyAvailabilityRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, availability: Availability) -> None:
        row = self.db.get(AvailabilityModel, availability.id)
        if row is None:
            row = AvailabilityModel(id=availability.id, provider_id=availability.provider_id)
            self.db.add(row)

        row.day_of_week = availability.day_of_week
        row.slots = [slot.to_dict() for slot in availability.slots]
        row.is_active = availability.is_active
        row.created_at = availability.created_at
        row.updated_at = availability.updated_at
        self.db.flush()

    def find_by_id(self, availability_id: str) -> Availability | None:
        row = self.db.get(AvailabilityModel, availability_id)
        return to_domain(row) if row is not None else None

    def find_by_provider_id(self, provider_id: str) -> list[Availability]:
        rows = self.db.query(AvailabilityModel).filter(
            AvailabilityModel.provider_id == provider_id,
        ).order_by(AvailabilityModel.day_of_week.asc()).all()
        return [to_domain(row) for row in rows]

    def find_by_provider_id_and_day(self, provider_id: str, day_of_week: int) -> Availability | None:
        row = self.db.query(AvailabilityModel).filter(
            AvailabilityModel.provider_id == provider_id,
            AvailabilityModel.day_of_week == day_of_week,
        ).first()
        return to_domain(row) if row is not None else None

    def find_active_by_provider_id(self, provider_id: str) -> list[Availability]:
        rows = self.db.query(AvailabilityModel).filter(
            AvailabilityModel.provider_id == provider_id,
            AvailabilityModel.is_active.is_(True),
        ).order_by(AvailabilityModel.day_of_week.asc()).all()
        return [to_domain(row) for row in rows]

    def delete(self, availability_id: str) -> None:
        row = self.db.get(AvailabilityModel, availability_id)
        if row is not None:
            self.db.delete(row)
            self.db.flush()
