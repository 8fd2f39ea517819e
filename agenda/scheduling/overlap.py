"""
Overlap detection

All intervals are half-open: [start, end). An appointment ending at 10:00
does not conflict with a slot starting at 10:00.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from agenda.domain.appointment import Appointment
from agenda.domain.time_slot import time_to_minutes


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def slot_to_datetime(slot: str, day: date) -> datetime:
    """UTC instant of an "HH:MM" slot on the given calendar day."""
    minutes = time_to_minutes(slot)
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """First and last instant of a UTC calendar day, both inclusive."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def find_overlapping_appointment(
    appointments: Iterable[Appointment],
    starts_at: datetime,
    ends_at: datetime,
    exclude_id: str | None = None,
) -> Appointment | None:
    """First non-cancelled appointment intersecting [starts_at, ends_at)."""
    for appointment in appointments:
        if appointment.is_cancelled or appointment.id == exclude_id:
            continue
        if intervals_overlap(starts_at, ends_at, appointment.starts_at, appointment.ends_at):
            return appointment
    return None


def filter_occupied_slots(
    slots: Iterable[str],
    appointments: Iterable[Appointment],
    day: date,
    duration_minutes: int,
) -> list[str]:
    appointments = list(appointments)
    duration = timedelta(minutes=duration_minutes)
    available: list[str] = []

    for slot in slots:
        slot_start = slot_to_datetime(slot, day)
        if find_overlapping_appointment(appointments, slot_start, slot_start + duration) is None:
            available.append(slot)

    return available


def filter_future_slots(slots: Iterable[str], day: date, now: datetime) -> list[str]:
    return [slot for slot in slots if slot_to_datetime(slot, day) > now]
