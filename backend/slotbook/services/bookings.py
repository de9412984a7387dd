# backend/slotbook/services/bookings.py
"""
Staff-side booking queries: roster, status overrides, dashboard counters,
activity feed and the bulk reset.

Creation and cancellation live in services/admission.py because both
touch the slot counter.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from ..database import commit_or_raise
from ..errors import NotFoundError
from ..models import Bookings, Slots, Subjects, utc_now

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 50


@dataclass
class RosterEntry:
    id: str
    student_name: str
    student_id: str
    student_email: str
    subject_id: str
    subject_name: str
    slot_id: str
    slot_start: datetime | None
    slot_duration: int
    status: str
    answers: dict
    created_at: datetime


def list_roster(db: Session, subject_id: str | None = None) -> list[RosterEntry]:
    """Bookings with subject and slot context, newest first."""
    query = (
        select(Bookings, Subjects.name, Slots.start_time, Slots.duration)
        .outerjoin(Subjects, Bookings.subject_id == Subjects.id)
        .outerjoin(Slots, Bookings.slot_id == Slots.id)
    )
    if subject_id:
        query = query.where(Bookings.subject_id == subject_id)
    query = query.order_by(Bookings.created_at.desc(), Bookings.id)

    return [
        RosterEntry(
            id=b.id,
            student_name=b.student_name,
            student_id=b.student_id,
            student_email=b.student_email,
            subject_id=b.subject_id,
            subject_name=subject_name or "Unknown",
            slot_id=b.slot_id,
            slot_start=start_time,
            slot_duration=duration or 0,
            status=b.status,
            answers=_load_answers(b.custom_answers),
            created_at=b.created_at,
        )
        for b, subject_name, start_time, duration in db.execute(query).all()
    ]


def update_booking_status(db: Session, booking_id: str, status: str) -> Bookings:
    booking = db.get(Bookings, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    booking.status = status
    commit_or_raise(db)
    logger.info("Booking %s status set to %s", booking_id, status)
    return booking


def booking_stats(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Counters for the staff dashboard. "Today" is the current UTC date."""
    now = now or utc_now()
    today = datetime.combine(now.date(), time.min)

    def count(query) -> int:
        return db.execute(query).scalar_one()

    return {
        "total_bookings": count(select(func.count(Bookings.id))),
        "today_bookings": count(
            select(func.count(Bookings.id)).where(
                Bookings.created_at >= today,
                Bookings.created_at < today + timedelta(days=1),
            )
        ),
        "total_subjects": count(select(func.count(Subjects.id))),
        "upcoming_slots": count(select(func.count(Slots.id)).where(Slots.start_time > now)),
        "available_slots": count(
            select(func.count(Slots.id)).where(
                Slots.start_time > now,
                Slots.current_bookings < Slots.max_capacity,
            )
        ),
    }


@dataclass
class ActivityEntry:
    id: str
    type: str
    message: str
    user: str
    timestamp: datetime


def recent_activity(db: Session, limit: int = ACTIVITY_LIMIT) -> list[ActivityEntry]:
    """Latest bookings as feed entries, newest first."""
    rows = db.execute(
        select(Bookings.id, Bookings.student_name, Bookings.created_at, Subjects.name)
        .outerjoin(Subjects, Bookings.subject_id == Subjects.id)
        .order_by(Bookings.created_at.desc(), Bookings.id)
        .limit(limit)
    ).all()

    return [
        ActivityEntry(
            id=booking_id,
            type="booking",
            message=f"{student} booked {subject or 'Unknown'}",
            user=student,
            timestamp=created_at,
        )
        for booking_id, student, created_at, subject in rows
    ]


def clear_all_bookings(db: Session) -> int:
    """
    Delete every booking and zero every slot counter, in one commit.

    Returns:
        Number of bookings removed.
    """
    result = db.execute(delete(Bookings).execution_options(synchronize_session=False))
    db.execute(
        update(Slots)
        .values(current_bookings=0)
        .execution_options(synchronize_session=False)
    )
    commit_or_raise(db)

    logger.warning("All bookings cleared (%d removed), slot counters reset", result.rowcount)
    return result.rowcount


def _load_answers(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}
