"""
Slot generation

Turns a day's open windows into candidate service start times. Candidates
advance by a fixed step, not by the service duration, so consecutive
candidates may overlap each other: 09:00 and 09:30 for a 60 minute service
are both valid, distinct offsets.
"""

from typing import Iterable

from agenda.core.errors import ValidationError
from agenda.domain.time_slot import TimeSlot, minutes_to_time

SLOT_STEP_MINUTES = 30


def generate_all_slots(windows: Iterable[TimeSlot], duration_minutes: int) -> list[str]:
    """
    Every "HH:MM" start time whose service fits entirely inside a window.

    Args:
        windows: validated, non-overlapping windows of a single day
        duration_minutes: service duration

    Returns:
        list[str]: ascending zero-padded start times, e.g. ["09:00", "09:30"]
    """
    if duration_minutes <= 0:
        raise ValidationError('Service duration must be positive', 'INVALID_SERVICE_DURATION')

    slots: list[str] = []

    for window in windows:
        current = window.start_minutes
        end = window.end_minutes

        while current + duration_minutes <= end:
            slots.append(minutes_to_time(current))
            current += SLOT_STEP_MINUTES

    # Zero-padded HH:MM sorts lexicographically in chronological order.
    return sorted(slots)
