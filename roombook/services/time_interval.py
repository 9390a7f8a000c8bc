# roombook/services/time_interval.py
"""
Half-open time windows within a business day.

All comparisons happen in minute space: a TimeOfDay maps to
`hour * 60 + minute`, and a window `[start, end)` includes its start and
excludes its end. Validation helpers never raise; they return a list of
FieldError so callers can report every violation at once.
"""
from __future__ import annotations

from roombook.schemas.errors import FieldError
from roombook.schemas.meeting import TimeOfDay

BUSINESS_DAY_START_HOUR = 8
LAST_START_HOUR = 16
BUSINESS_DAY_END_HOUR = 17
SLOT_MINUTES = 15


def to_minutes(t: TimeOfDay) -> int:
    return t.hour * 60 + t.minute


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """
    True when `[a_start, a_end)` and `[b_start, b_end)` share at least one minute.

    A window ending exactly when the other starts does not overlap it.
    """
    return a_start < b_end and b_start < a_end


def window_overlaps(
    start: TimeOfDay,
    end: TimeOfDay,
    other_start: TimeOfDay,
    other_end: TimeOfDay,
) -> bool:
    return overlaps(to_minutes(start), to_minutes(end), to_minutes(other_start), to_minutes(other_end))


def format_time_of_day(t: TimeOfDay) -> str:
    """
    Render as a 12-hour clock string, e.g. `9:00 AM` or `4:45 PM`.
    """
    period = "PM" if t.hour >= 12 else "AM"
    display_hour = t.hour % 12 or 12
    return f"{display_hour}:{t.minute:02d} {period}"


# --------------------------------------------------------------------------
# Validation helpers
# --------------------------------------------------------------------------

def validate_time_of_day(field: str, t: TimeOfDay) -> list[FieldError]:
    errors: list[FieldError] = []
    if not 0 <= t.hour <= 23:
        errors.append(FieldError(field=field, message="Hour must be between 0 and 23."))
    if not 0 <= t.minute <= 59:
        errors.append(FieldError(field=field, message="Minute must be between 0 and 59."))
    return errors


def validate_business_hours(field: str, t: TimeOfDay, min_hour: int, max_hour: int) -> list[FieldError]:
    if min_hour <= t.hour <= max_hour:
        return []
    return [FieldError(field=field, message=f"Hour must be between {min_hour} and {max_hour}.")]


def validate_granularity(field: str, t: TimeOfDay, step: int = SLOT_MINUTES) -> list[FieldError]:
    if t.minute % step == 0:
        return []
    return [FieldError(field=field, message=f"Minute must be a multiple of {step}.")]


def validate_window(start: TimeOfDay, end: TimeOfDay) -> list[FieldError]:
    if to_minutes(end) > to_minutes(start):
        return []
    return [FieldError(field="end_time", message="End time must be after start time.")]


def validate_meeting_window(
    start: TimeOfDay,
    end: TimeOfDay,
    *,
    day_start_hour: int = BUSINESS_DAY_START_HOUR,
    last_start_hour: int = LAST_START_HOUR,
    day_end_hour: int = BUSINESS_DAY_END_HOUR,
    step: int = SLOT_MINUTES,
) -> list[FieldError]:
    """
    Apply every time rule for a bookable meeting and collect the failures.

    Rules
    -----
    - start and end are valid clock times
    - start hour within [day_start_hour, last_start_hour]
    - end hour within [day_start_hour, day_end_hour]
    - minutes fall on the slot grid (0/15/30/45 by default)
    - end is strictly after start
    """
    errors = validate_time_of_day("start_time", start) + validate_time_of_day("end_time", end)
    if errors:
        return errors

    errors += validate_business_hours("start_time", start, day_start_hour, last_start_hour)
    errors += validate_business_hours("end_time", end, day_start_hour, day_end_hour)
    errors += validate_granularity("start_time", start, step)
    errors += validate_granularity("end_time", end, step)
    errors += validate_window(start, end)
    return errors
