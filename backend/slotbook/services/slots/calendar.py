# backend/slotbook/services/slots/calendar.py
"""
Calendar expansion: scheduling spec -> candidate slot start times.

Pure, no I/O. The same spec always yields the same ordered list.

Produces per-slot data:
  CandidateSlot(day, start)  - wall-clock time in the scheduling zone

Contains:
✓ explicit date lists (invalid entries dropped)
✓ recurring date ranges with a day-of-week filter (0 = Sunday)
✓ several time windows per day
✓ gap between consecutive slots
✓ lunch exclusion (walk resumes at lunch end)

Does NOT contain:
✗ Timezone conversion (materializer)
✗ Existing slots or bookings (duplicates runs simply add more slots)
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import NamedTuple

from ...errors import InvalidSpecification
from .config import clock_to_minutes, minutes_to_time

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

MSG_NO_DATES = "No valid dates provided"
MSG_BAD_DATE = "Invalid date format"
MSG_NO_TIME_RANGES = "At least one time range is required"
MSG_BAD_TIME = "Invalid time format"
MSG_BAD_DURATION = "Duration must be a positive number of minutes"
MSG_BAD_GAP = "Break time must not be negative"
MSG_BAD_DAY = "Days must be between 0 (Sunday) and 6 (Saturday)"
MSG_BAD_LUNCH = "Lunch break must end after it starts"


@dataclass(frozen=True)
class TimeWindow:
    start: str  # "HH:MM"
    end: str    # "HH:MM"


@dataclass(frozen=True)
class ScheduleSpec:
    """
    Compact scheduling specification.

    Explicit mode when `dates` is non-empty, recurring mode otherwise
    (`start_date`..`end_date`, filtered by `days`; empty `days` = every day).
    """
    time_windows: tuple[TimeWindow, ...]
    duration: int
    gap: int = 0
    dates: tuple[str, ...] = ()
    start_date: str | None = None
    end_date: str | None = None
    days: tuple[int, ...] = ()
    lunch: TimeWindow | None = None

    @property
    def is_recurring(self) -> bool:
        return not self.dates


class CandidateSlot(NamedTuple):
    day: date
    start: time

    def local_datetime(self) -> datetime:
        return datetime.combine(self.day, self.start)


@dataclass(frozen=True)
class _Window:
    start: int  # minutes since midnight
    end: int


@dataclass(frozen=True)
class _Plan:
    windows: list[_Window] = field(default_factory=list)
    lunch: _Window | None = None
    duration: int = 0
    step: int = 0


def expand_schedule(spec: ScheduleSpec) -> list[CandidateSlot]:
    """
    Expand a schedule into candidate slots.

    Raises:
        InvalidSpecification: no valid dates, no time windows, malformed
            clock values, or a recurring filter that excludes every day.

    Returns:
        Candidates ordered by date (input order for explicit dates,
        chronological for ranges), then by start time. An empty list means
        the spec is valid but no slot fits its windows.
    """
    plan = _build_plan(spec)
    days = resolve_dates(spec)

    slots: list[CandidateSlot] = []
    for day in days:
        for minute in _day_start_minutes(plan):
            slots.append(CandidateSlot(day, minutes_to_time(minute)))
    return slots


# ── Date set ─────────────────────────────────────────────────────────────


def resolve_dates(spec: ScheduleSpec) -> list[date]:
    """Resolve the spec's date set, without duplicates."""
    if not spec.is_recurring:
        resolved = _unique(d for d in map(parse_date, spec.dates) if d is not None)
        if not resolved:
            raise InvalidSpecification(MSG_NO_DATES)
        return resolved

    if not spec.start_date:
        raise InvalidSpecification(MSG_NO_DATES)

    start = parse_date(spec.start_date)
    end = parse_date(spec.end_date) if spec.end_date else start
    if start is None or end is None:
        raise InvalidSpecification(MSG_BAD_DATE)

    wanted = set(spec.days)
    if any(d not in range(7) for d in wanted):
        raise InvalidSpecification(MSG_BAD_DAY)

    resolved = [
        day for day in iter_days(start, end)
        if not wanted or day_of_week(day) in wanted
    ]
    if not resolved:
        raise InvalidSpecification(MSG_NO_DATES)
    return resolved


def parse_date(value: str | None) -> date | None:
    """Parse "YYYY-MM-DD" (trailing text ignored). None if not a real calendar date."""
    if not isinstance(value, str):
        return None
    match = _DATE_RE.match(value.strip())
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        # e.g. 2023-02-29, 2024-13-01
        return None


def iter_days(start: date, end: date):
    """Every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_of_week(day: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return day.isoweekday() % 7


# ── Time windows ─────────────────────────────────────────────────────────


def _build_plan(spec: ScheduleSpec) -> _Plan:
    if not spec.time_windows:
        raise InvalidSpecification(MSG_NO_TIME_RANGES)
    if not isinstance(spec.duration, int) or spec.duration <= 0:
        raise InvalidSpecification(MSG_BAD_DURATION)
    if spec.gap < 0:
        raise InvalidSpecification(MSG_BAD_GAP)

    windows = [_parse_window(w) for w in spec.time_windows]

    lunch = None
    if spec.lunch is not None:
        lunch = _parse_window(spec.lunch)
        if lunch.end <= lunch.start:
            raise InvalidSpecification(MSG_BAD_LUNCH)

    return _Plan(
        windows=windows,
        lunch=lunch,
        duration=spec.duration,
        step=spec.duration + spec.gap,
    )


def _parse_window(window: TimeWindow) -> _Window:
    start = clock_to_minutes(window.start)
    end = clock_to_minutes(window.end)
    if start is None or end is None:
        raise InvalidSpecification(MSG_BAD_TIME)
    return _Window(start, end)


def _day_start_minutes(plan: _Plan) -> list[int]:
    """Start minutes for one day across all windows, sorted and unique."""
    starts: set[int] = set()
    for window in plan.windows:
        starts.update(_walk_window(window, plan))
    return sorted(starts)


def _walk_window(window: _Window, plan: _Plan):
    lunch = plan.lunch
    current = window.start

    while current + plan.duration <= window.end:
        slot_end = current + plan.duration

        if lunch is not None and current < lunch.end and slot_end > lunch.start:
            # Resume at lunch end instead of shifting a partial slot into lunch
            current = lunch.end
            continue

        yield current
        current += plan.step


def _unique(items) -> list:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
