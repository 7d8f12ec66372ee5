# clientkeeper/core.py

from datetime import datetime, timedelta
from typing import Optional, Tuple

from clientkeeper.data import shop_settings


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open intervals [start, end) overlap; touching ends do not."""
    return start_a < end_b and start_b < end_a


def appointment_interval(starts_at: datetime, duration_minutes: Optional[int]) -> Tuple[datetime, datetime]:
    duration = duration_minutes or shop_settings["default_duration_minutes"]
    return starts_at, starts_at + timedelta(minutes=duration)
