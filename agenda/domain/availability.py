"""Availability aggregate: a provider's recurring open hours for one weekday."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from agenda.core.errors import BusinessRuleError, ValidationError
from agenda.domain.time_slot import TimeSlot, is_valid_time, time_to_minutes, validate_time_slots

DAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_day_of_week(day_of_week: int) -> int:
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise ValidationError(
            'Day of week must be between 0 (Sunday) and 6 (Saturday)',
            'INVALID_DAY_OF_WEEK',
        )
    return day_of_week


def day_of_week_for(value: datetime) -> int:
    """Sunday-based weekday index (0=Sunday) of a date or UTC instant."""
    return value.isoweekday() % 7


@dataclass
class Availability:
    provider_id: str
    day_of_week: int
    slots: list[TimeSlot]
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        validate_day_of_week(self.day_of_week)
        self.slots = validate_time_slots(self.slots)

    def update_slots(self, new_slots: Iterable[TimeSlot | Mapping[str, Any]], at: datetime | None = None) -> None:
        self.slots = validate_time_slots(new_slots)
        self.updated_at = at or _utcnow()

    def activate(self, at: datetime | None = None) -> None:
        if self.is_active:
            raise BusinessRuleError('Availability is already active', 'AVAILABILITY_ALREADY_ACTIVE')
        self.is_active = True
        self.updated_at = at or _utcnow()

    def deactivate(self, at: datetime | None = None) -> None:
        if not self.is_active:
            raise BusinessRuleError('Availability is already inactive', 'AVAILABILITY_ALREADY_INACTIVE')
        self.is_active = False
        self.updated_at = at or _utcnow()

    def is_time_available(self, value: str) -> bool:
        if not is_valid_time(value):
            return False
        minutes = time_to_minutes(value)
        return any(slot.contains(minutes) for slot in self.slots)

    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]
