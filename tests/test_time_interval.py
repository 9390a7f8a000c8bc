# tests/test_time_interval.py
import pytest

from roombook.schemas.meeting import TimeOfDay
from roombook.services import time_interval


def t(hour: int, minute: int = 0) -> TimeOfDay:
    return TimeOfDay(hour=hour, minute=minute)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((540, 600), (570, 630), True),  # partial overlap
        ((540, 600), (600, 660), False),  # back-to-back
        ((600, 660), (540, 600), False),  # back-to-back, reversed
        ((540, 660), (570, 600), True),  # containment
        ((540, 600), (540, 600), True),  # identical
        ((540, 570), (600, 630), False),  # disjoint
    ],
)
def test_overlaps_half_open(a, b, expected):
    assert time_interval.overlaps(*a, *b) is expected
    assert time_interval.overlaps(*b, *a) is expected


def test_window_overlaps_uses_minutes():
    assert time_interval.window_overlaps(t(9), t(10), t(9, 45), t(10, 30)) is True
    assert time_interval.window_overlaps(t(9), t(10), t(10), t(10, 30)) is False


def test_to_minutes():
    assert time_interval.to_minutes(t(0)) == 0
    assert time_interval.to_minutes(t(16, 45)) == 1005


@pytest.mark.parametrize(
    "value, expected",
    [
        (t(9), "9:00 AM"),
        (t(0, 5), "12:05 AM"),
        (t(12, 30), "12:30 PM"),
        (t(16, 45), "4:45 PM"),
    ],
)
def test_format_time_of_day(value, expected):
    assert time_interval.format_time_of_day(value) == expected


def test_validate_meeting_window_accepts_business_hours():
    assert time_interval.validate_meeting_window(t(8), t(17)) == []
    assert time_interval.validate_meeting_window(t(16, 45), t(17)) == []


def test_validate_meeting_window_reports_every_violation():
    errors = time_interval.validate_meeting_window(t(7, 10), t(18, 5))
    fields = [e.field for e in errors]

    # hour range and granularity on both ends
    assert fields.count("start_time") == 2
    assert fields.count("end_time") == 2


def test_validate_meeting_window_rejects_end_before_start():
    errors = time_interval.validate_meeting_window(t(11), t(10))
    assert [(e.field, e.message) for e in errors] == [
        ("end_time", "End time must be after start time.")
    ]


def test_validate_meeting_window_rejects_zero_length():
    errors = time_interval.validate_meeting_window(t(10), t(10))
    assert len(errors) == 1
    assert errors[0].field == "end_time"


def test_start_after_last_start_hour_is_rejected():
    errors = time_interval.validate_meeting_window(t(17), t(17, 15))
    assert any(e.field == "start_time" for e in errors)


def test_invalid_clock_values_short_circuit():
    """
    Out-of-range clock values bypass the schema only via model_construct;
    they are reported without evaluating the business rules.
    """
    bad_start = TimeOfDay.model_construct(hour=25, minute=0)
    errors = time_interval.validate_meeting_window(bad_start, t(10))

    assert [(e.field, e.message) for e in errors] == [
        ("start_time", "Hour must be between 0 and 23.")
    ]


def test_custom_rules_are_honoured():
    errors = time_interval.validate_meeting_window(
        t(7, 30),
        t(8, 10),
        day_start_hour=7,
        last_start_hour=20,
        day_end_hour=21,
        step=5,
    )
    assert errors == []
