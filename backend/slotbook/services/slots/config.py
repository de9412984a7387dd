# backend/slotbook/services/slots/config.py
"""
Scheduling configuration and clock/zone helpers for slot generation.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...config import settings

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Configuration for slot generation.

    Attributes:
        timezone_name: Zone in which staff enter dates and clock times.
            Slots are stored as naive UTC after conversion.
        batch_size: Rows per insert statement when materializing slots.
    """
    timezone_name: str = "UTC"
    batch_size: int = 50

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        # Fail at startup rather than on the first generation request
        resolve_timezone(self.timezone_name)

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)


@lru_cache
def get_scheduling_config() -> SchedulingConfig:
    return SchedulingConfig(
        timezone_name=settings.schedule_timezone,
        batch_size=settings.slot_batch_size,
    )


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}") from None


def clock_to_minutes(value: str) -> int | None:
    """
    Parse "HH:MM" (optionally ":SS") into minutes since midnight.

    "24:00" is accepted as end-of-day. Returns None for anything else invalid.
    """
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        return None
    if hours == 24 and minutes == 0:
        return MINUTES_PER_DAY
    if hours > 23:
        return None
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def to_utc_naive(day: date, at: time, tz: tzinfo) -> datetime:
    """Wall-clock (day, at) in tz -> naive UTC datetime for storage."""
    local = datetime.combine(day, at, tzinfo=tz)
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def normalize_instant(value: datetime, tz: tzinfo) -> datetime:
    """
    Any incoming instant -> naive UTC.

    Offset-aware values are converted; naive values are taken as wall-clock
    time in tz.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime, tz: tzinfo) -> datetime:
    """Stored naive UTC -> aware datetime in tz (for display)."""
    return value.replace(tzinfo=timezone.utc).astimezone(tz)
