"""
Slot materialization: batching, per-batch atomicity, zone conversion.
"""

from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from slotbook.errors import InvalidSpecification, NotFoundError, PersistenceError
from slotbook.models import Slots
from slotbook.services.slots import (
    SchedulingConfig,
    ScheduleSpec,
    TimeWindow,
    generate_slots,
)

# 2024-05-10, 09:00-11:00 in 20 minute steps -> 6 slots
SIX_SLOTS = ScheduleSpec(
    time_windows=(TimeWindow("09:00", "11:00"),),
    duration=20,
    dates=("2024-05-10",),
)


def _slot_count(db) -> int:
    return db.execute(select(func.count(Slots.id))).scalar_one()


def test_generate_persists_every_candidate(db, subject):
    count = generate_slots(db, subject.id, SIX_SLOTS, capacity=3, location="Room 101")

    slots = db.scalars(select(Slots).order_by(Slots.start_time)).all()
    assert count == 6
    assert len(slots) == 6
    assert slots[0].start_time == datetime(2024, 5, 10, 9, 0)
    assert slots[-1].start_time == datetime(2024, 5, 10, 10, 40)
    assert all(s.current_bookings == 0 and s.max_capacity == 3 for s in slots)
    assert all(s.location == "Room 101" for s in slots)


def test_batches_are_committed_in_chunks(db, subject, monkeypatch):
    statements = []
    real_execute = db.execute

    def spy(statement, *args, **kwargs):
        statements.append(args[0] if args else None)
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", spy)

    count = generate_slots(
        db, subject.id, SIX_SLOTS, capacity=1,
        config=SchedulingConfig(batch_size=4),
    )

    assert count == 6
    assert [len(rows) for rows in statements] == [4, 2]


def test_failed_batch_keeps_earlier_batches(db, subject, monkeypatch):
    real_execute = db.execute
    calls = {"n": 0}

    def flaky(statement, *args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT INTO slots", {}, Exception("disk I/O error"))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", flaky)

    with pytest.raises(PersistenceError) as exc_info:
        generate_slots(
            db, subject.id, SIX_SLOTS, capacity=1,
            config=SchedulingConfig(batch_size=2),
        )

    monkeypatch.undo()
    assert exc_info.value.details == {"committed": 2}
    assert _slot_count(db) == 2


def test_wall_clock_converted_from_schedule_zone(db, subject):
    spec = ScheduleSpec(
        time_windows=(TimeWindow("09:00", "09:30"),),
        duration=30,
        dates=("2024-05-10", "2024-01-10"),
    )

    generate_slots(db, subject.id, spec, capacity=1, config=SchedulingConfig("Europe/Berlin"))

    starts = sorted(db.scalars(select(Slots.start_time)).all())
    # CET in January (+1), CEST in May (+2)
    assert starts == [datetime(2024, 1, 10, 8, 0), datetime(2024, 5, 10, 7, 0)]


def test_zero_candidates_is_not_an_error(db, subject):
    spec = ScheduleSpec(time_windows=(TimeWindow("09:00", "09:10"),), duration=20, dates=("2024-05-10",))

    assert generate_slots(db, subject.id, spec, capacity=1) == 0
    assert _slot_count(db) == 0


def test_validation_happens_before_any_write(db, subject):
    with pytest.raises(InvalidSpecification):
        generate_slots(db, subject.id, SIX_SLOTS, capacity=0)
    with pytest.raises(NotFoundError):
        generate_slots(db, "missing-subject", SIX_SLOTS, capacity=1)

    assert _slot_count(db) == 0


def test_unknown_timezone_rejected():
    with pytest.raises(ValueError):
        SchedulingConfig(timezone_name="Mars/Olympus_Mons")
