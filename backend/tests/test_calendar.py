"""
Calendar expansion: pure, no database.
"""

from datetime import date, time

import pytest

from slotbook.errors import InvalidSpecification
from slotbook.services.slots import ScheduleSpec, TimeWindow, expand_schedule
from slotbook.services.slots.calendar import day_of_week, resolve_dates

MORNING = (TimeWindow("09:00", "10:00"),)


def _recurring(start: str, end: str, days=(), windows=MORNING, **kwargs) -> ScheduleSpec:
    return ScheduleSpec(
        time_windows=windows,
        duration=kwargs.pop("duration", 20),
        start_date=start,
        end_date=end,
        days=tuple(days),
        **kwargs,
    )


def test_thursday_across_leap_day():
    spec = _recurring("2024-02-26", "2024-03-02", days=[4])

    slots = expand_schedule(spec)

    assert [(s.day, s.start) for s in slots] == [
        (date(2024, 2, 29), time(9, 0)),
        (date(2024, 2, 29), time(9, 20)),
        (date(2024, 2, 29), time(9, 40)),
    ]


def test_weekday_filter_respected():
    # Mon/Wed/Fri over three weeks of March 2024
    spec = _recurring("2024-03-01", "2024-03-21", days=[1, 3, 5])

    days = {s.day for s in expand_schedule(spec)}

    assert days
    assert all(day_of_week(d) in (1, 3, 5) for d in days)
    assert date(2024, 3, 4) in days  # Monday
    assert date(2024, 3, 2) not in days  # Saturday


def test_empty_day_filter_means_every_day():
    spec = _recurring("2024-12-30", "2025-01-02")

    assert resolve_dates(spec) == [
        date(2024, 12, 30),
        date(2024, 12, 31),
        date(2025, 1, 1),
        date(2025, 1, 2),
    ]


@pytest.mark.parametrize(
    "year, included",
    [(2024, True), (2023, False), (2000, True), (1900, False)],
)
def test_feb_29_only_in_leap_years(year, included):
    spec = _recurring(f"{year}-02-27", f"{year}-03-01")

    days = {s.day for s in expand_schedule(spec)}

    assert (len(days) == 4) is included
    if included:
        assert date(year, 2, 29) in days


def test_invalid_explicit_dates_are_dropped():
    spec = ScheduleSpec(
        time_windows=MORNING,
        duration=30,
        dates=("2023-02-29", "2024-05-10", "not-a-date", "2024-05-10"),
    )

    slots = expand_schedule(spec)

    # Only 2024-05-10 survives, once
    assert [(s.day, s.start) for s in slots] == [
        (date(2024, 5, 10), time(9, 0)),
        (date(2024, 5, 10), time(9, 30)),
    ]


def test_explicit_dates_keep_input_order():
    spec = ScheduleSpec(time_windows=MORNING, duration=60, dates=("2024-05-12", "2024-05-10"))

    assert [s.day for s in expand_schedule(spec)] == [date(2024, 5, 12), date(2024, 5, 10)]


def test_gap_between_slots():
    spec = _recurring("2024-05-10", "2024-05-10", duration=20, gap=10)

    assert [s.start for s in expand_schedule(spec)] == [time(9, 0), time(9, 30)]


def test_lunch_skip_resumes_at_lunch_end():
    spec = _recurring(
        "2024-05-10",
        "2024-05-10",
        windows=(TimeWindow("11:00", "14:00"),),
        duration=45,
        lunch=TimeWindow("12:00", "13:00"),
    )

    starts = [s.start for s in expand_schedule(spec)]

    # 11:45 would overlap lunch; the walk jumps to 13:00 instead
    assert starts == [time(11, 0), time(13, 0)]
    for start in starts:
        minutes = start.hour * 60 + start.minute
        assert not (minutes < 13 * 60 and minutes + 45 > 12 * 60)


def test_multiple_windows_sorted_without_duplicates():
    spec = _recurring(
        "2024-05-10",
        "2024-05-10",
        windows=(TimeWindow("14:00", "15:00"), TimeWindow("09:00", "10:00"), TimeWindow("09:00", "09:30")),
        duration=30,
    )

    assert [s.start for s in expand_schedule(spec)] == [
        time(9, 0), time(9, 30), time(14, 0), time(14, 30),
    ]


def test_expansion_is_repeatable():
    spec = _recurring("2024-01-01", "2024-01-31", days=[2, 4], lunch=TimeWindow("09:30", "09:40"))

    assert expand_schedule(spec) == expand_schedule(spec)


def test_valid_spec_with_no_room_yields_zero():
    spec = _recurring("2024-05-10", "2024-05-10", duration=90)

    assert expand_schedule(spec) == []


@pytest.mark.parametrize(
    "spec, message",
    [
        (ScheduleSpec(time_windows=MORNING, duration=20, dates=("nope",)), "No valid dates provided"),
        (ScheduleSpec(time_windows=MORNING, duration=20), "No valid dates provided"),
        (_recurring("2024-13-01", "2024-12-31"), "Invalid date format"),
        (_recurring("2024-02-26", "2024-02-28", days=[6]), "No valid dates provided"),
        (_recurring("2024-02-26", "2024-02-28", windows=()), "At least one time range is required"),
        (_recurring("2024-02-26", "2024-02-28", windows=(TimeWindow("9am", "10:00"),)), "Invalid time format"),
        (_recurring("2024-02-26", "2024-02-28", duration=0), "Duration must be a positive number of minutes"),
    ],
)
def test_invalid_specifications(spec, message):
    with pytest.raises(InvalidSpecification) as exc_info:
        expand_schedule(spec)

    assert exc_info.value.message == message


def test_day_of_week_sunday_is_zero():
    assert day_of_week(date(2024, 3, 3)) == 0
    assert day_of_week(date(2024, 2, 29)) == 4
    assert day_of_week(date(2024, 3, 2)) == 6
