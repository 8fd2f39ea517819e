"""HH:MM time windows and the rules a day's windows must satisfy."""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from agenda.core.errors import BusinessRuleError, ValidationError

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')
MIN_SLOT_DURATION_MINUTES = 15


def is_valid_time(value: str) -> bool:
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


@dataclass(frozen=True)
class TimeSlot:
    """One contiguous open window within a day, e.g. 09:00-12:00."""

    start: str
    end: str

    def __post_init__(self) -> None:
        if not is_valid_time(self.start):
            raise ValidationError(
                f'Invalid start time format: {self.start}. Use HH:MM',
                'INVALID_TIME_FORMAT',
            )
        if not is_valid_time(self.end):
            raise ValidationError(
                f'Invalid end time format: {self.end}. Use HH:MM',
                'INVALID_TIME_FORMAT',
            )
        if self.end_minutes <= self.start_minutes:
            raise ValidationError(
                f'End time ({self.end}) must be after start time ({self.start})',
                'INVALID_TIME_RANGE',
            )
        if self.duration_minutes < MIN_SLOT_DURATION_MINUTES:
            raise ValidationError(
                f'Time slot duration must be at least {MIN_SLOT_DURATION_MINUTES} minutes',
                'INVALID_SLOT_DURATION',
            )

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def contains(self, minutes: int) -> bool:
        return self.start_minutes <= minutes < self.end_minutes

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TimeSlot':
        return cls(start=data.get('start'), end=data.get('end'))

    def to_dict(self) -> dict[str, str]:
        return {'start': self.start, 'end': self.end}


def validate_time_slots(slots: Iterable['TimeSlot | Mapping[str, Any]']) -> list[TimeSlot]:
    """Validate a day's windows and return them as TimeSlot values.

    The input order is preserved. Overlap is checked on a copy sorted by
    start; windows that only touch (10:00-11:00, 11:00-12:00) are allowed.
    """
    normalized = [slot if isinstance(slot, TimeSlot) else TimeSlot.from_dict(slot) for slot in slots]

    if not normalized:
        raise ValidationError('At least one time slot is required', 'NO_TIME_SLOTS')

    ordered = sorted(normalized, key=lambda slot: slot.start_minutes)
    for current, following in zip(ordered, ordered[1:]):
        if following.start_minutes < current.end_minutes:
            raise BusinessRuleError(
                f'Time slots overlap: {current.start}-{current.end} and {following.start}-{following.end}',
                'SLOTS_OVERLAP',
            )

    return normalized
