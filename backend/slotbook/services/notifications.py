"""
backend/slotbook/services/notifications.py

Booking confirmation mail via an external HTTP mail endpoint.

Best-effort only: dispatched after the response (FastAPI BackgroundTasks),
never retried, failures logged and dropped.
"""

import logging
from dataclasses import asdict, dataclass

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotificationError
from ..models import Bookings, Slots, Subjects
from .slots.config import from_utc_naive, get_scheduling_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingConfirmation:
    to: str
    studentName: str
    subjectName: str
    slotDate: str   # "Thursday, February 29, 2024"
    slotTime: str   # "09:00 AM"
    duration: int
    location: str
    bookingId: str


def build_confirmation(db: Session, booking_id: str) -> BookingConfirmation | None:
    """Collect mail fields for a booking. None if the booking is gone."""
    row = db.execute(
        select(Bookings, Slots, Subjects)
        .join(Slots, Bookings.slot_id == Slots.id)
        .join(Subjects, Bookings.subject_id == Subjects.id)
        .where(Bookings.id == booking_id)
    ).first()
    if row is None:
        return None

    booking, slot, subject = row
    local_start = from_utc_naive(slot.start_time, get_scheduling_config().tz)

    return BookingConfirmation(
        to=booking.student_email,
        studentName=booking.student_name,
        subjectName=subject.name,
        slotDate=f"{local_start:%A, %B} {local_start.day}, {local_start.year}",
        slotTime=f"{local_start:%I:%M %p}",
        duration=slot.duration,
        location=slot.location or "",
        bookingId=booking.id,
    )


def prepare_confirmation(db: Session, booking_id: str) -> BookingConfirmation | None:
    """
    build_confirmation for the request path. The booking is already
    committed, so a failed lookup only costs the mail.
    """
    try:
        return build_confirmation(db, booking_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Confirmation for booking {booking_id} skipped, lookup failed: {e!r}")
        return None


def send_confirmation(confirmation: BookingConfirmation) -> None:
    """
    POST the confirmation to the mail endpoint.

    Raises:
        NotificationError: transport failure or non-2xx answer.
    """
    payload = {"secret": settings.email_api_secret, **asdict(confirmation)}

    try:
        with httpx.Client(timeout=settings.email_timeout_seconds) as client:
            resp = client.post(settings.email_api_url, json=payload)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        raise NotificationError(details={"booking_id": confirmation.bookingId}) from e


def notifications_enabled() -> bool:
    return bool(settings.email_api_url and settings.email_api_secret)


def dispatch_confirmation(confirmation: BookingConfirmation) -> None:
    """Background task entry point. Never raises NotificationError."""
    if not notifications_enabled():
        return

    try:
        send_confirmation(confirmation)
        logger.info(f"Confirmation sent for booking {confirmation.bookingId}")
    except NotificationError as e:
        logger.warning(
            f"Confirmation for booking {confirmation.bookingId} not sent: {e.__cause__!r}"
        )
