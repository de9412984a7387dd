# backend/slotbook/services/slots/store.py
"""
Slot queries and staff-side slot maintenance.

Deletions always remove dependent bookings first. Capacity edits use a
conditional update so max_capacity never drops below current_bookings.
"""

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, joinedload

from ...database import commit_or_raise
from ...errors import InvalidSpecification, NotFoundError
from ...models import Bookings, Slots, Subjects, utc_now
from .config import SchedulingConfig, get_scheduling_config, normalize_instant

logger = logging.getLogger(__name__)

MSG_SLOT_NOT_FOUND = "Slot not found"
MSG_CAPACITY_BELOW_BOOKINGS = "Capacity cannot be lower than current bookings"
MSG_BAD_DURATION = "Duration must be a positive number of minutes"
MSG_BAD_CAPACITY = "Capacity must be at least 1"


def list_slots(
    db: Session,
    subject_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    available_only: bool = False,
    include_past: bool = False,
    now: datetime | None = None,
) -> list[Slots]:
    """
    Slots ordered by start time.

    Date bounds are inclusive UTC calendar dates.
    """
    now = now or utc_now()

    query = select(Slots).options(joinedload(Slots.subject))

    if subject_id:
        query = query.where(Slots.subject_id == subject_id)
    if not include_past:
        query = query.where(Slots.start_time > now)
    if date_from:
        query = query.where(Slots.start_time >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.where(Slots.start_time < datetime.combine(date_to + timedelta(days=1), time.min))
    if available_only:
        query = query.where(Slots.current_bookings < Slots.max_capacity)

    query = query.order_by(Slots.start_time.asc(), Slots.id.asc())
    return list(db.scalars(query).all())


def get_slot(db: Session, slot_id: str) -> Slots:
    slot = db.get(Slots, slot_id)
    if slot is None:
        raise NotFoundError(MSG_SLOT_NOT_FOUND)
    return slot


def create_slot(
    db: Session,
    subject_id: str,
    start_time: datetime,
    duration: int,
    capacity: int,
    location: str = "",
    config: SchedulingConfig | None = None,
) -> Slots:
    config = config or get_scheduling_config()

    if duration < 1:
        raise InvalidSpecification(MSG_BAD_DURATION)
    if capacity < 1:
        raise InvalidSpecification(MSG_BAD_CAPACITY)
    if db.get(Subjects, subject_id) is None:
        raise NotFoundError("Subject not found")

    slot = Slots(
        subject_id=subject_id,
        start_time=normalize_instant(start_time, config.tz),
        duration=duration,
        max_capacity=capacity,
        current_bookings=0,
        location=location or "",
    )
    db.add(slot)
    commit_or_raise(db)
    db.refresh(slot)
    return slot


def update_slot(
    db: Session,
    slot_id: str,
    changes: dict,
    config: SchedulingConfig | None = None,
) -> Slots:
    """
    Apply staff edits (start_time, duration, max_capacity, location).
    """
    config = config or get_scheduling_config()
    slot = get_slot(db, slot_id)

    capacity = changes.get("max_capacity")
    if "max_capacity" in changes and (capacity is None or capacity < 1):
        raise InvalidSpecification(MSG_BAD_CAPACITY)
    if changes.get("duration") is not None and changes["duration"] < 1:
        raise InvalidSpecification(MSG_BAD_DURATION)

    if capacity is not None:
        # Guarded against concurrent admissions moving current_bookings
        result = db.execute(
            update(Slots)
            .where(Slots.id == slot_id, Slots.current_bookings <= capacity)
            .values(max_capacity=capacity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            raise InvalidSpecification(MSG_CAPACITY_BELOW_BOOKINGS)

    if changes.get("start_time") is not None:
        slot.start_time = normalize_instant(changes["start_time"], config.tz)
    if changes.get("duration") is not None:
        slot.duration = changes["duration"]
    if "location" in changes:
        slot.location = changes["location"] or ""

    commit_or_raise(db)
    db.refresh(slot)
    return slot


def delete_slots(db: Session, slot_ids: list[str]) -> int:
    """Delete slots and their bookings. Returns the number of slots removed."""
    if not slot_ids:
        return 0

    db.execute(delete(Bookings).where(Bookings.slot_id.in_(slot_ids)).execution_options(synchronize_session=False))
    result = db.execute(delete(Slots).where(Slots.id.in_(slot_ids)).execution_options(synchronize_session=False))
    commit_or_raise(db)

    logger.info("Deleted %d slots", result.rowcount)
    return result.rowcount


def clear_past_slots(db: Session, now: datetime | None = None) -> int:
    """Delete slots that already started, with their bookings."""
    now = now or utc_now()

    past_ids = select(Slots.id).where(Slots.start_time < now)
    db.execute(delete(Bookings).where(Bookings.slot_id.in_(past_ids)).execution_options(synchronize_session=False))
    result = db.execute(delete(Slots).where(Slots.start_time < now).execution_options(synchronize_session=False))
    commit_or_raise(db)

    logger.info("Cleared %d past slots", result.rowcount)
    return result.rowcount
