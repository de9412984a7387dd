# backend/slotbook/services/admission.py
"""
Booking admission: reserve one seat in a slot and record the booking.

No locks. Overbooking is prevented by a single conditional UPDATE
(compare-and-swap on current_bookings), checked through its affected-row
count:

1. Idempotency  - existing (slot_id, student_id) booking → DuplicateBooking
2. Pre-check    - slot already full → SlotFull
3. Increment    - current_bookings + 1 WHERE current_bookings = observed
                  AND current_bookings < max_capacity
4. Verification - rowcount 0 means the row moved; re-read and retry while
                  seats remain, SlotFull once none do
5. Insert       - booking row; on failure the seat is released again
                  (floored decrement) before the error propagates

Notification is not part of admission; callers dispatch it afterwards.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import commit_or_raise
from ..errors import (
    MSG_SLOT_FULL,
    MSG_SLOT_JUST_FILLED,
    DuplicateBooking,
    InvalidSpecification,
    NotFoundError,
    PersistenceError,
    SlotFull,
)
from ..models import Bookings, Slots, new_id

logger = logging.getLogger(__name__)

BOOKING_STATUS_CONFIRMED = "confirmed"

MSG_SLOT_GONE = "Slot no longer exists"
MSG_SUBJECT_MISMATCH = "Invalid slot or subject ID"
MSG_BOOKING_NOT_FOUND = "Booking not found"


class AdmissionState(str, Enum):
    PENDING = "pending"
    DUPLICATE_REJECTED = "duplicate_rejected"
    FULL_REJECTED = "full_rejected"
    RESERVED_THEN_BOOKED = "reserved_then_booked"
    RESERVED_THEN_COMPENSATED = "reserved_then_compensated"


@dataclass(frozen=True)
class AdmissionRequest:
    slot_id: str
    subject_id: str
    student_name: str
    student_id: str
    student_email: str
    custom_answers: dict[str, str] = field(default_factory=dict)


def admit_booking(
    db: Session,
    request: AdmissionRequest,
    max_attempts: int | None = None,
) -> Bookings:
    """
    Run one admission attempt.

    Raises:
        DuplicateBooking: requester already holds a booking for this slot.
        SlotFull: no seat left (pre-check, or lost the race for the last one).
        InvalidSpecification: slot missing or not under the given subject.
        PersistenceError: storage failure; a taken seat was released first.

    Returns:
        The committed booking.
    """
    max_attempts = max_attempts or settings.admission_max_attempts

    if _find_booking_id(db, request.slot_id, request.student_id) is not None:
        _log_outcome(AdmissionState.DUPLICATE_REJECTED, request)
        raise DuplicateBooking()

    slot_subject = db.execute(
        select(Slots.subject_id).where(Slots.id == request.slot_id)
    ).scalar_one_or_none()
    if slot_subject is None:
        raise InvalidSpecification(MSG_SLOT_GONE)
    if slot_subject != request.subject_id:
        raise InvalidSpecification(MSG_SUBJECT_MISMATCH)

    try:
        _reserve_seat(db, request.slot_id, max_attempts)
    except SlotFull:
        _log_outcome(AdmissionState.FULL_REJECTED, request)
        raise

    try:
        booking = _insert_booking(db, request)
    except Exception as exc:
        db.rollback()
        _release_seat(db, request.slot_id)
        _log_outcome(AdmissionState.RESERVED_THEN_COMPENSATED, request)

        if isinstance(exc, IntegrityError) and _find_booking_id(
            db, request.slot_id, request.student_id
        ) is not None:
            # Concurrent duplicate from the same requester won the insert
            raise DuplicateBooking() from exc
        if isinstance(exc, SQLAlchemyError):
            raise PersistenceError(details={"slot_id": request.slot_id}) from exc
        raise

    _log_outcome(AdmissionState.RESERVED_THEN_BOOKED, request)
    return booking


def cancel_booking(db: Session, booking_id: str) -> str:
    """
    Delete a booking and give its seat back (floored at zero).

    Returns:
        The slot id the booking belonged to.
    """
    booking = db.get(Bookings, booking_id)
    if booking is None:
        raise NotFoundError(MSG_BOOKING_NOT_FOUND)

    slot_id = booking.slot_id
    db.execute(delete(Bookings).where(Bookings.id == booking_id).execution_options(synchronize_session=False))
    db.execute(_decrement(slot_id))
    commit_or_raise(db)

    logger.info("Booking %s cancelled, seat released on slot %s", booking_id, slot_id)
    return slot_id


# ── Steps ────────────────────────────────────────────────────────────────


def _reserve_seat(db: Session, slot_id: str, max_attempts: int) -> int:
    """
    Take one seat with a conditional increment.

    Returns:
        current_bookings after our increment.
    """
    counts = _read_counts(db, slot_id)

    for attempt in range(max_attempts):
        if counts is None:
            raise InvalidSpecification(MSG_SLOT_GONE)

        observed, capacity = counts
        if observed >= capacity:
            raise SlotFull(MSG_SLOT_FULL if attempt == 0 else MSG_SLOT_JUST_FILLED)

        try:
            result = db.execute(
                update(Slots)
                .where(
                    Slots.id == slot_id,
                    Slots.current_bookings == observed,
                    Slots.current_bookings < Slots.max_capacity,
                )
                .values(current_bookings=Slots.current_bookings + 1)
                .execution_options(synchronize_session=False)
            )
            affected = result.rowcount
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(details={"slot_id": slot_id}) from exc
        # Commit either way so no write lock is held while re-reading
        commit_or_raise(db)

        if affected == 1:
            return observed + 1

        logger.debug("Seat race lost on slot %s at count %d, re-reading", slot_id, observed)
        counts = _read_counts(db, slot_id)

    raise SlotFull(MSG_SLOT_JUST_FILLED)


def _insert_booking(db: Session, request: AdmissionRequest) -> Bookings:
    booking = Bookings(
        id=new_id(),
        slot_id=request.slot_id,
        subject_id=request.subject_id,
        student_name=request.student_name,
        student_id=request.student_id,
        student_email=request.student_email,
        custom_answers=json.dumps(request.custom_answers or {}),
        status=BOOKING_STATUS_CONFIRMED,
    )
    db.add(booking)
    db.commit()
    return booking


def _release_seat(db: Session, slot_id: str) -> None:
    """Compensation for a failed insert."""
    try:
        db.execute(_decrement(slot_id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Compensation failed: seat on slot %s stays reserved", slot_id)


def _decrement(slot_id: str):
    return (
        update(Slots)
        .where(Slots.id == slot_id, Slots.current_bookings > 0)
        .values(current_bookings=Slots.current_bookings - 1)
        .execution_options(synchronize_session=False)
    )


def _read_counts(db: Session, slot_id: str) -> tuple[int, int] | None:
    row = db.execute(
        select(Slots.current_bookings, Slots.max_capacity).where(Slots.id == slot_id)
    ).first()
    if row is None:
        return None
    return row.current_bookings, row.max_capacity


def _find_booking_id(db: Session, slot_id: str, student_id: str) -> str | None:
    return db.execute(
        select(Bookings.id).where(
            Bookings.slot_id == slot_id,
            Bookings.student_id == student_id,
        )
    ).scalar_one_or_none()


def _log_outcome(state: AdmissionState, request: AdmissionRequest) -> None:
    logger.info(
        "Admission %s: slot=%s student=%s",
        state.value, request.slot_id, request.student_id,
    )
