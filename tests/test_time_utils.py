#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from dayledger.exceptions import (
    InvalidRangeError,
    MalformedDateError,
    MalformedTimeError,
)
from dayledger.time_utils import (
    HiddenRange,
    TimeInterval,
    Weekday,
    filter_hidden_time_slots,
    from_minutes,
    generate_time_slots,
    iter_dates,
    label_to_time,
    month_key,
    normalise_time,
    overlaps,
    parse_date,
    parse_weekday,
    slot_label,
    to_minutes,
    week_dates,
    week_key,
    weekday_of,
)


@pytest.mark.parametrize(
    "time, minutes",
    [("00:00", 0), ("09:30", 570), ("23:59", 1439), ("07:15:42", 435)],
)
def test_to_minutes(time: str, minutes: int):
    assert to_minutes(time) == minutes


@pytest.mark.parametrize("time", ["9:30", "24:00", "12:60", "noon", "", "09:30 PM"])
def test_to_minutes_malformed(time: str):
    with pytest.raises(MalformedTimeError):
        to_minutes(time)


def test_from_minutes_round_trips_through_normalise():
    assert from_minutes(570) == "09:30"
    assert normalise_time("18:05:00") == "18:05"
    with pytest.raises(MalformedTimeError):
        from_minutes(1440)


def test_parse_date():
    assert parse_date("2024-02-29") == datetime.date(2024, 2, 29)
    assert parse_date(datetime.datetime(2024, 1, 1, 12)) == datetime.date(2024, 1, 1)
    for value in ["2023-02-29", "01/02/2024", "2024-1-1", ""]:
        with pytest.raises(MalformedDateError):
            parse_date(value)


def test_intervals_touching_do_not_overlap():
    first = TimeInterval.from_times("09:00", "10:00")
    second = TimeInterval.from_times("10:00", "11:00")
    assert not overlaps(first, second)
    assert not second.overlaps(first)
    assert overlaps(first, TimeInterval.from_times("09:59", "10:30"))
    assert first.duration == 60
    assert first.contains(540) and not first.contains(600)


@pytest.mark.parametrize("start, end", [("10:00", "10:00"), ("11:00", "10:00")])
def test_inverted_interval(start: str, end: str):
    with pytest.raises(InvalidRangeError):
        TimeInterval.from_times(start, end)


def test_weekday_ordinals_start_on_sunday():
    assert Weekday.sunday.ordinal == 0
    assert Weekday.saturday.ordinal == 6
    # 2024-01-01 is a Monday, 2024-01-07 a Sunday
    assert weekday_of(datetime.date(2024, 1, 1)) == Weekday.monday
    assert weekday_of(datetime.date(2024, 1, 7)) == Weekday.sunday
    assert parse_weekday("Wednesday") == Weekday.wednesday
    assert parse_weekday(5) == Weekday.friday
    with pytest.raises(ValueError):
        parse_weekday("funday")


def test_iter_dates_is_inclusive():
    dates = list(iter_dates(datetime.date(2024, 2, 27), datetime.date(2024, 3, 1)))
    assert dates == [
        datetime.date(2024, 2, 27),
        datetime.date(2024, 2, 28),
        datetime.date(2024, 2, 29),
        datetime.date(2024, 3, 1),
    ]
    assert list(iter_dates(dates[0], dates[0])) == [dates[0]]
    with pytest.raises(InvalidRangeError):
        iter_dates(dates[1], dates[0])


def test_reporting_keys():
    sunday = datetime.date(2024, 1, 7)
    assert week_key(sunday) == datetime.date(2024, 1, 1)
    assert month_key(sunday) == "2024-01"
    week = week_dates(sunday)
    assert week[0] == datetime.date(2024, 1, 1) and len(week) == 7


def test_time_slots_and_labels():
    slots = generate_time_slots()
    assert len(slots) == 96
    assert slots[:2] == ["00:00", "00:15"]
    assert slot_label("00:00") == "12:00 AM"
    assert slot_label("07:15") == "7:15 AM"
    assert slot_label("12:30") == "12:30 PM"
    assert slot_label("23:45") == "11:45 PM"
    assert all(label_to_time(slot_label(slot)) == slot for slot in slots)
    with pytest.raises(ValueError):
        generate_time_slots(7)


def test_hidden_ranges_may_cross_midnight():
    slots = generate_time_slots(60)
    night = HiddenRange(start="22:00", end="06:00")
    visible = filter_hidden_time_slots(slots, [night])
    assert visible[0] == "06:00"
    assert visible[-1] == "21:00"
    disabled = HiddenRange(start="22:00", end="06:00", enabled=False)
    assert filter_hidden_time_slots(slots, [disabled]) == slots
    assert filter_hidden_time_slots(slots, None) == slots
