# salon/availability.py
"""Conflict detection and slot classification for one day of bookings.

All functions work on plain sequences of Appointment records so they can be
used against the store's snapshot or any list a caller already holds.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .core import Interval, format_minutes, overlaps, to_interval
from .data import ScheduleSettings, get_schedule_settings
from .schemas import Appointment, SlotAvailability, SlotStatus

logger = logging.getLogger(__name__)


def interval_of(appt: Appointment, default_duration: int = 60) -> Interval:
    return to_interval(appt.time, appt.duration_minutes or default_duration)


def active_on(appointments: Iterable[Appointment], date: str, provider_id: Optional[str] = None) -> List[Appointment]:
    """Non-cancelled appointments on `date`, optionally for a single provider."""
    return [
        a for a in appointments
        if a.is_active
        and a.date == date
        and (provider_id is None or a.provider_id == provider_id)
    ]


def find_conflict(
    appointments: Iterable[Appointment],
    provider_id: str,
    date: str,
    time: str,
    duration_minutes: int,
) -> Optional[Appointment]:
    """First active appointment of the provider that overlaps the candidate, if any."""
    candidate = to_interval(time, duration_minutes)
    for a in active_on(appointments, date, provider_id):
        if overlaps(candidate, interval_of(a)):
            return a
    return None


def has_conflict(appointments, provider_id, date, time, duration_minutes) -> bool:
    return find_conflict(appointments, provider_id, date, time, duration_minutes) is not None


def slot_grid(settings: Optional[ScheduleSettings] = None) -> List[str]:
    settings = settings or get_schedule_settings()
    grid = []
    current = settings.open_minute
    while current < settings.close_minute:
        grid.append(format_minutes(current))
        current += settings.slot_minutes
    return grid


def classify_slot(
    time: str,
    duration_minutes: int,
    provider_id: str,
    day_appointments: Sequence[Appointment],
    settings: ScheduleSettings,
) -> SlotAvailability:
    candidate = to_interval(time, duration_minutes)
    default = settings.default_duration_minutes

    # busy beats not-enough-time, own bookings before other providers'.
    # a start whose full duration does not fit before the next booking overlaps it
    other_hit = None
    for a in day_appointments:
        if not overlaps(candidate, interval_of(a, default)):
            continue
        if a.provider_id == provider_id:
            return SlotAvailability(time=time, status=SlotStatus.busy_self, conflicting_id=a.id)
        if other_hit is None:
            other_hit = a
    if other_hit is not None:
        return SlotAvailability(time=time, status=SlotStatus.busy_other, conflicting_id=other_hit.id)

    if candidate.start < settings.open_minute or candidate.end > settings.close_minute:
        return SlotAvailability(time=time, status=SlotStatus.not_enough_time)

    return SlotAvailability(time=time, status=SlotStatus.available)


def classify_slots(
    appointments: Iterable[Appointment],
    date: str,
    provider_id: str,
    duration_minutes: int,
    grid: Optional[Sequence[str]] = None,
    settings: Optional[ScheduleSettings] = None,
) -> List[SlotAvailability]:
    """Classify every grid start time for a booking of `duration_minutes`.

    Appointments of every provider on the date are considered: overlaps with
    the requested provider give busy_self, with anyone else busy_other.
    """
    settings = settings or get_schedule_settings()
    if grid is None:
        grid = slot_grid(settings)
    day_appointments = active_on(appointments, date)
    slots = [classify_slot(t, duration_minutes, provider_id, day_appointments, settings) for t in grid]
    logger.debug(f"Classified {len(slots)} slots for provider {provider_id} on {date} ({duration_minutes} min)")
    return slots


def available_times(appointments, date, provider_id, duration_minutes, grid=None, settings=None) -> List[str]:
    return [
        s.time
        for s in classify_slots(appointments, date, provider_id, duration_minutes, grid, settings)
        if s.status == SlotStatus.available
    ]
