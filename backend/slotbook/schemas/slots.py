# backend/slotbook/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import datetime

from pydantic import field_validator, model_validator

from ..services.slots import ScheduleSpec, TimeWindow
from .common import CamelModel, UtcDateTime, invalid, sanitize

DEFAULT_RANGE_START = "09:00"
DEFAULT_RANGE_END = "17:00"


def _check_id(v: str, message: str) -> str:
    if not 1 <= len(v.strip()) <= 36:
        raise invalid(message)
    return v.strip()


# ── Read ─────────────────────────────────────────────────────────────────


class SlotRead(CamelModel):
    """Public view of a slot."""
    id: str
    subject_id: str
    start_time: UtcDateTime
    duration: int
    max_capacity: int
    current_bookings: int


class StaffSlotRead(SlotRead):
    subject_name: str | None = None
    teacher: str | None = None
    location: str = ""

    @model_validator(mode="before")
    @classmethod
    def flatten_subject(cls, data):
        # ORM Slots -> dict with the joined subject's name/teacher
        subject = getattr(data, "subject", None)
        if subject is None or isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "subject_id": data.subject_id,
            "start_time": data.start_time,
            "duration": data.duration,
            "max_capacity": data.max_capacity,
            "current_bookings": data.current_bookings,
            "subject_name": subject.name,
            "teacher": subject.teacher,
            "location": data.location or "",
        }


# ── Write ────────────────────────────────────────────────────────────────


class SlotCreate(CamelModel):
    subject_id: str
    start_time: datetime | None = None
    duration: int = 20
    max_capacity: int = 1
    location: str = ""

    @field_validator("subject_id")
    @classmethod
    def check_subject_id(cls, v: str) -> str:
        return _check_id(v, "Invalid subject ID")

    @field_validator("location")
    @classmethod
    def trim(cls, v: str) -> str:
        return sanitize(v)

    @model_validator(mode="after")
    def require_start(self):
        if self.start_time is None:
            raise invalid("Start time required")
        return self


class SlotUpdate(CamelModel):
    start_time: datetime | None = None
    duration: int | None = None
    max_capacity: int | None = None
    location: str | None = None

    @field_validator("location")
    @classmethod
    def trim(cls, v: str | None) -> str | None:
        return sanitize(v) if v is not None else v


class TimeRange(CamelModel):
    start_time: str
    end_time: str


class LunchBreak(CamelModel):
    start: str | None = None
    end: str | None = None


class SlotGenerateRequest(CamelModel):
    """
    Generation request.

    Explicit mode: `dates`. Recurring mode: `start_date`..`end_date` with
    `days` (0 = Sunday; null or empty = every day). `time_ranges` falls back to a single
    `start_time`..`end_time` window (09:00-17:00 when both are absent).
    """
    subject_id: str
    dates: list[str] | None = None
    start_date: str | None = None
    end_date: str | None = None
    days: list[int] | None = None
    time_ranges: list[TimeRange] | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: int
    capacity: int
    break_time: int | None = 0
    location: str | None = ""
    lunch_break: LunchBreak | None = None

    @field_validator("subject_id")
    @classmethod
    def check_subject_id(cls, v: str) -> str:
        return _check_id(v, "Invalid subject ID")

    @field_validator("location")
    @classmethod
    def trim(cls, v: str | None) -> str:
        return sanitize(v or "")

    def to_schedule_spec(self) -> ScheduleSpec:
        ranges = self.time_ranges or [
            TimeRange(
                start_time=self.start_time or DEFAULT_RANGE_START,
                end_time=self.end_time or DEFAULT_RANGE_END,
            )
        ]

        lunch = None
        if self.lunch_break and self.lunch_break.start and self.lunch_break.end:
            lunch = TimeWindow(self.lunch_break.start, self.lunch_break.end)

        return ScheduleSpec(
            time_windows=tuple(TimeWindow(r.start_time, r.end_time) for r in ranges),
            duration=self.duration,
            gap=self.break_time or 0,
            dates=tuple(d for d in (self.dates or []) if d),
            start_date=self.start_date,
            end_date=self.end_date,
            days=tuple(self.days or ()),
            lunch=lunch,
        )


class SlotBulkDelete(CamelModel):
    slot_ids: list[str]

    @field_validator("slot_ids")
    @classmethod
    def drop_bad_ids(cls, v: list[str]) -> list[str]:
        return [i for i in v if 1 <= len(i.strip()) <= 36]


class SlotCreated(CamelModel):
    success: bool = True
    id: str
