from __future__ import annotations

import re
from datetime import datetime
from enum import Enum


class DayOfWeek(str, Enum):
    sunday = "Sunday"
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"


DAY_VALUES = {day.value for day in DayOfWeek}

# Academic week as rendered in the routine grid.
WEEK_ORDER: tuple[DayOfWeek, ...] = (
    DayOfWeek.saturday,
    DayOfWeek.sunday,
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
)

TIME_SLOTS: tuple[tuple[str, str], ...] = (
    ("08:30", "10:00"),
    ("10:00", "11:30"),
    ("11:30", "13:00"),
    ("13:00", "14:30"),
    ("14:30", "16:00"),
    ("16:00", "17:30"),
)

SLOT_END_BY_START: dict[str, str] = dict(TIME_SLOTS)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
TWELVE_HOUR_PATTERN = re.compile(r"^(0?[1-9]|1[0-2]):[0-5]\d\s*[AaPp][Mm]$")


def normalize_time(value: str) -> str:
    """Return ``value`` as a zero padded ``HH:MM`` string.

    Accepts the 24-hour form used by the slot catalog and the 12-hour
    ``"01:00 PM"`` form the routine sheets are printed with.
    """
    cleaned = value.strip()
    if TIME_PATTERN.match(cleaned):
        return cleaned
    if TWELVE_HOUR_PATTERN.match(cleaned):
        compact = cleaned.replace(" ", "").upper()
        return datetime.strptime(compact, "%I:%M%p").strftime("%H:%M")
    raise ValueError("Time must be in HH:MM 24-hour or HH:MM AM/PM format")


def normalize_day(value: str | DayOfWeek) -> DayOfWeek:
    if isinstance(value, DayOfWeek):
        return value
    cleaned = value.strip().capitalize()
    if cleaned not in DAY_VALUES:
        raise ValueError(f"Invalid day value: {value}")
    return DayOfWeek(cleaned)


def slot_end(start_time: str) -> str:
    try:
        return SLOT_END_BY_START[start_time]
    except KeyError:
        raise ValueError(f"{start_time} is not the start of a catalog time slot") from None


def slot_label(start_time: str) -> str:
    return f"{start_time} - {slot_end(start_time)}"


def parse_slot_label(label: str) -> tuple[str, str]:
    """Split a ``"08:30 AM - 10:00 AM"`` style label into normalized bounds."""
    start, separator, end = label.partition("-")
    if not separator:
        raise ValueError(f"Invalid time slot label: {label}")
    return normalize_time(start), normalize_time(end)
