"""Date normalisation for class sessions.

Every value is treated as wall-clock local time: a time-of-day or UTC
offset attached to an input is dropped, never converted, so a session
stored as ``2025-06-10`` lands on 10 June regardless of the host's zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from tutorhub.domain import logging as domain_logging
from tutorhub.domain.entities import WEEKDAY_NAMES

# Tried in order after the ISO parse.
CANDIDATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%Y",  # M/d/yyyy; strptime accepts unpadded fields for %m and %d
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


class DateParseError(ValueError):
    """Raised when a value cannot be read as a calendar date."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unparseable date: {value!r}")
        self.value = value


@dataclass(frozen=True)
class DateParseResult:
    """Tagged outcome of a date parse."""

    value: Optional[date]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _parse_text(text: str) -> date:
    iso = text[:-1] + "+00:00" if text[-1:] in ("Z", "z") else text
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass
    for fmt in CANDIDATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise DateParseError(text)


def normalize_date(value: Any) -> date:
    """Return the local calendar date for ``value``.

    Accepts ``date``/``datetime`` objects and strings in ISO-8601 or one of
    :data:`CANDIDATE_FORMATS`. Raises :class:`DateParseError` when nothing
    matches.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise DateParseError(value)
        return _parse_text(text)
    raise DateParseError(value)


def try_normalize_date(value: Any) -> DateParseResult:
    try:
        return DateParseResult(normalize_date(value))
    except DateParseError as exc:
        return DateParseResult(None, str(exc))


def parse_date_or_now(value: Any, *, today: date | None = None, context: str = "") -> date:
    """Normalise ``value`` or fall back to ``today`` with a logged warning.

    This is the last-resort fallback used at the edges (mapper, detail
    views); a corrupt date therefore surfaces as "today".
    """

    try:
        return normalize_date(value)
    except DateParseError:
        fallback = today or date.today()
        where = f" for {context}" if context else ""
        domain_logging.warn(
            f"Could not parse date {value!r}{where}; falling back to {fallback.isoformat()}."
        )
        return fallback


def start_of_day(value: Any = None) -> date:
    """Return the calendar date of ``value`` with any time dropped; today when ``None``."""

    if value is None:
        return date.today()
    return normalize_date(value)


def same_local_day(left: Any, right: Any) -> bool:
    """Compare two date-like values on year, month and day only."""

    a = normalize_date(left)
    b = normalize_date(right)
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def format_date_for_storage(value: Any) -> str:
    """Return ``YYYY-MM-DD`` built from the local date parts of ``value``."""

    day = normalize_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def ensure_date_format(value: Any) -> str:
    """Pass through ``YYYY-MM-DD`` strings untouched and reformat anything else."""

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10 and text[4] == "-" and text[7] == "-":
            try:
                datetime.strptime(text, "%Y-%m-%d")
                return text
            except ValueError:
                pass
    return format_date_for_storage(value)


def weekday_name(value: Any) -> str:
    return WEEKDAY_NAMES[normalize_date(value).weekday()]


__all__ = [
    "CANDIDATE_FORMATS",
    "DateParseError",
    "DateParseResult",
    "ensure_date_format",
    "format_date_for_storage",
    "normalize_date",
    "parse_date_or_now",
    "same_local_day",
    "start_of_day",
    "try_normalize_date",
    "weekday_name",
]
