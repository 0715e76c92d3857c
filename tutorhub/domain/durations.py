"""Start/end time and duration reconciliation."""

from __future__ import annotations

import math
import re
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Optional

from tutorhub.domain import logging as domain_logging

_NUMERIC_PREFIX = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")
_HH_MM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_HOUR_RANGE = re.compile(r"^(\d{1,2})\s*[-\s]\s*\d{1,2}\s*(am|pm)?$", re.IGNORECASE)
_HOUR_ONLY = re.compile(r"^(\d{1,2})\s*(am|pm)?$", re.IGNORECASE)


def parse_numeric(value: Any) -> float:
    """Best-effort float parse that never raises.

    ``None``, empty strings, NaN, infinities and non-numeric text give
    ``0.0``. Strings are read up to the first non-numeric character, so
    ``"1.5 hrs"`` is ``1.5``.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        raw: Any = value
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return 0.0
        raw = match.group(1)
    else:
        return 0.0
    try:
        number = float(raw)
    except (OverflowError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_duration(value: Any) -> float:
    """Return a stored duration in hours, ``0.0`` when unusable."""

    return parse_numeric(value)


def split_hh_mm(value: str) -> Optional[tuple[int, int]]:
    match = _HH_MM.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def calculate_end_time(start_time: Optional[str], duration_hours: Any) -> str:
    """Return ``start_time + duration_hours`` as ``HH:MM``.

    Whole hours and rounded remainder minutes are added separately and the
    minute overflow carries into the hour. The hour wraps past midnight
    (``"22:45"`` plus 1.5 gives ``"00:15"``). Returns ``""`` when either
    input is missing, zero or malformed.
    """

    duration = parse_duration(duration_hours)
    if not start_time or duration <= 0:
        return ""

    parts = split_hh_mm(str(start_time))
    if parts is None:
        domain_logging.warn(f"Cannot calculate end time from malformed start {start_time!r}.")
        return ""

    start_hour, start_minute = parts
    whole_hours = math.floor(duration)
    extra_minutes = int(round((duration - whole_hours) * 60))

    minute = start_minute + extra_minutes
    hour = start_hour + whole_hours
    if minute >= 60:
        hour += minute // 60
        minute %= 60

    return f"{hour % 24:02d}:{minute:02d}"


def duration_between(start_time: Optional[str], end_time: Optional[str]) -> float:
    """Return the hours between two ``HH:MM`` values on the same day."""

    if not start_time or not end_time:
        return 0.0
    start = split_hh_mm(str(start_time))
    end = split_hh_mm(str(end_time))
    if start is None or end is None:
        return 0.0
    minutes = (end[0] * 60 + end[1]) - (start[0] * 60 + start[1])
    if minutes <= 0:
        return 0.0
    return round(minutes / 60.0, 4)


def _apply_meridiem(hour: int, meridiem: Optional[str]) -> int:
    marker = (meridiem or "").lower()
    if marker == "pm" and hour < 12:
        return hour + 12
    if marker == "am" and hour == 12:
        return 0
    return hour


def parse_start_time(value: Any) -> str:
    """Read the many start-time spellings found in class logs as ``HH:MM``.

    Handles ``18:00``, ``6:00``, ``18:00:00``, ``6:30 PM``, ``6pm`` and
    ranges such as ``6-7pm`` (the start of the range is kept). Returns
    ``""`` when the value cannot be read.
    """

    if isinstance(value, time):
        return value.strftime("%H:%M")
    if not isinstance(value, str):
        return ""
    text = value.strip()
    if not text:
        return ""

    parts = split_hh_mm(text)
    if parts is not None:
        return f"{parts[0]:02d}:{parts[1]:02d}"

    for fmt in ("%I:%M %p", "%I:%M%p"):
        try:
            return datetime.strptime(text.upper(), fmt).strftime("%H:%M")
        except ValueError:
            continue

    for pattern in (_HOUR_RANGE, _HOUR_ONLY):
        match = pattern.match(text)
        if match:
            hour = _apply_meridiem(int(match.group(1)), match.group(2))
            if hour > 23:
                return ""
            return f"{hour:02d}:00"

    return ""


def format_time_12h(value: Optional[str]) -> str:
    """Render ``HH:MM`` as ``h:MM AM/PM``; unreadable input is returned as-is."""

    if not value:
        return ""
    parts = split_hh_mm(str(value))
    if parts is None:
        return str(value)
    hour, minute = parts
    period = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {period}"


__all__ = [
    "calculate_end_time",
    "duration_between",
    "format_time_12h",
    "parse_duration",
    "parse_numeric",
    "parse_start_time",
    "split_hh_mm",
]
