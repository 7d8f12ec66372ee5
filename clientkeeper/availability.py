# clientkeeper/availability.py

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List

from clientkeeper.core import appointment_interval, overlaps
from clientkeeper.data import shop_settings
from clientkeeper.lifecycle import is_active
from clientkeeper.models import Appointment


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    label: str
    next_available: bool = False


def slot_label(slot_start: datetime) -> str:
    """12-hour clock without a leading zero, e.g. '9:30 AM'."""
    hour = slot_start.hour % 12 or 12
    suffix = "AM" if slot_start.hour < 12 else "PM"
    return f"{hour}:{slot_start.minute:02d} {suffix}"


def candidate_starts(day: date) -> List[datetime]:
    """Every slot start from opening up to, but not including, closing time."""
    open_dt = datetime.combine(day, shop_settings["open_time"])
    close_dt = datetime.combine(day, shop_settings["close_time"])
    slot_delta = timedelta(minutes=shop_settings["slot_minutes"])

    starts = []
    current = open_dt
    while current < close_dt:
        starts.append(current)
        current += slot_delta
    return starts


def available_slots(
    day: date,
    appointments: Iterable[Appointment],
    now: datetime,
) -> List[TimeSlot]:
    """
    Bookable slots for `day`, earliest first.

    A slot survives when it starts strictly after `now` and a booking of the
    default length starting there overlaps none of the active `appointments`.
    The first surviving slot is marked as next available. An empty list means
    the day is fully booked.
    """
    booking_minutes = shop_settings["default_duration_minutes"]
    busy = [
        appointment_interval(a.starts_at, a.duration_minutes)
        for a in appointments
        if is_active(a.status)
    ]

    free = []
    for slot_start in candidate_starts(day):
        # 1) No past or "now" slots
        if slot_start <= now:
            continue

        # 2) Prospective booking must not overlap an existing one
        slot_start, slot_end = appointment_interval(slot_start, booking_minutes)
        if any(overlaps(slot_start, slot_end, busy_start, busy_end) for busy_start, busy_end in busy):
            continue

        free.append(slot_start)

    return [
        TimeSlot(start=start, label=slot_label(start), next_available=(index == 0))
        for index, start in enumerate(free)
    ]
