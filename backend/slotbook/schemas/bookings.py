# backend/slotbook/schemas/bookings.py

from typing import Any

from pydantic import Field, field_validator

from .common import CamelModel, UtcDateTime, invalid, is_email, sanitize


class BookingCreate(CamelModel):
    slot_id: str
    subject_id: str
    student_name: str
    student_id: str
    student_email: str
    custom_answers: dict[str, Any] | None = Field(default=None, validate_default=True)

    @field_validator("slot_id", "subject_id")
    @classmethod
    def check_ids(cls, v: str) -> str:
        if not v.strip() or len(v) > 36:
            raise invalid("Invalid slot or subject ID")
        return v

    @field_validator("student_name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if len(v.strip()) < 2 or len(v) > 255:
            raise invalid("Student name must be 2-255 characters")
        return sanitize(v)

    @field_validator("student_id")
    @classmethod
    def check_student_id(cls, v: str) -> str:
        if len(v.strip()) < 1 or len(v) > 100:
            raise invalid("Invalid student ID")
        return sanitize(v, 100)

    @field_validator("student_email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not is_email(v):
            raise invalid("Invalid email address")
        return sanitize(v)

    @field_validator("custom_answers")
    @classmethod
    def default_answers(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        return v or {}


class BookingCreated(CamelModel):
    success: bool = True
    booking_id: str


class BookingStatusUpdate(CamelModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if not 1 <= len(v.strip()) <= 50:
            raise invalid("Invalid status")
        return sanitize(v, 50)


class RosterEntryRead(CamelModel):
    id: str
    student_name: str
    student_id: str
    student_email: str
    subject_id: str
    subject_name: str
    slot_id: str
    slot_start: UtcDateTime | None = None
    slot_duration: int = 0
    status: str
    answers: dict[str, Any] = {}
    created_at: UtcDateTime


class BookingStats(CamelModel):
    total_bookings: int
    today_bookings: int
    total_subjects: int
    upcoming_slots: int
    available_slots: int


class ActivityEntryRead(CamelModel):
    id: str
    type: str
    message: str
    user: str
    timestamp: UtcDateTime
