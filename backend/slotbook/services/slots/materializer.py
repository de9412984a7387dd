# backend/slotbook/services/slots/materializer.py
"""
Slot materialization: candidate start times -> persisted slot rows.

Rows are inserted in batches of SchedulingConfig.batch_size. Each batch
commits on its own; a failing batch leaves earlier batches in place and
raises PersistenceError. Nothing is retried.
"""

import logging
from collections.abc import Iterable, Iterator

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import InvalidSpecification, NotFoundError, PersistenceError
from ...models import Slots, Subjects, new_id, utc_now
from .calendar import CandidateSlot, ScheduleSpec, expand_schedule
from .config import SchedulingConfig, get_scheduling_config, to_utc_naive

logger = logging.getLogger(__name__)

MSG_BAD_CAPACITY = "Capacity must be at least 1"
MSG_SUBJECT_NOT_FOUND = "Subject not found"


def generate_slots(
    db: Session,
    subject_id: str,
    spec: ScheduleSpec,
    capacity: int,
    location: str = "",
    config: SchedulingConfig | None = None,
) -> int:
    """
    Expand `spec` and persist the result for a subject.

    Validation (subject, capacity, spec) happens before the first write.

    Returns:
        Number of slots created. 0 is a valid outcome.
    """
    config = config or get_scheduling_config()

    if capacity is None or capacity < 1:
        raise InvalidSpecification(MSG_BAD_CAPACITY)
    if db.get(Subjects, subject_id) is None:
        raise NotFoundError(MSG_SUBJECT_NOT_FOUND)

    candidates = expand_schedule(spec)
    if not candidates:
        logger.info("Slot generation for subject %s produced no slots", subject_id)
        return 0

    return materialize_slots(
        db,
        subject_id=subject_id,
        candidates=candidates,
        duration=spec.duration,
        capacity=capacity,
        location=location,
        config=config,
    )


def materialize_slots(
    db: Session,
    subject_id: str,
    candidates: Iterable[CandidateSlot],
    duration: int,
    capacity: int,
    location: str = "",
    config: SchedulingConfig | None = None,
) -> int:
    """
    Insert one slot per candidate with current_bookings = 0.

    Raises:
        PersistenceError: a batch failed; `details["committed"]` holds the
            number of rows already committed by earlier batches.
    """
    config = config or get_scheduling_config()
    rows = build_slot_rows(subject_id, candidates, duration, capacity, location, config)

    committed = 0
    for batch in _chunks(rows, config.batch_size):
        try:
            db.execute(insert(Slots), batch)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Slot batch insert failed for subject %s after %d committed rows: %s",
                subject_id, committed, exc,
            )
            raise PersistenceError(details={"committed": committed}) from exc
        committed += len(batch)

    logger.info("Materialized %d slots for subject %s", committed, subject_id)
    return committed


def build_slot_rows(
    subject_id: str,
    candidates: Iterable[CandidateSlot],
    duration: int,
    capacity: int,
    location: str,
    config: SchedulingConfig,
) -> list[dict]:
    tz = config.tz
    created_at = utc_now()
    return [
        {
            "id": new_id(),
            "subject_id": subject_id,
            "start_time": to_utc_naive(c.day, c.start, tz),
            "duration": duration,
            "max_capacity": capacity,
            "current_bookings": 0,
            "location": location or "",
            "created_at": created_at,
        }
        for c in candidates
    ]


def _chunks(rows: list[dict], size: int) -> Iterator[list[dict]]:
    for i in range(0, len(rows), size):
        yield rows[i:i + size]
