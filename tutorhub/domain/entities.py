"""Domain entities representing scheduled class sessions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Iterable

CLASS_STATUSES: tuple[str, ...] = ("scheduled", "completed", "cancelled", "pending", "error")
ATTENDANCE_STATUSES: tuple[str, ...] = ("present", "absent", "late", "excused", "pending")
PAYMENT_STATUSES: tuple[str, ...] = ("paid", "unpaid", "pending", "overdue")

# Index matches ``date.weekday()``.
WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

ERROR_PLACEHOLDER = "Error Loading"
ERROR_STATUS = "error"


def coerce_choice(value: Any, allowed: Iterable[str], default: str) -> str:
    """Return ``value`` lower-cased when it is one of ``allowed``, else ``default``."""

    if not isinstance(value, str):
        return default
    candidate = value.strip().lower()
    return candidate if candidate in allowed else default


def normalize_weekdays(days: Iterable[Any] | None) -> list[str]:
    """Return canonical weekday names in calendar order, dropping unknown entries.

    Accepts full names or three-letter abbreviations in any case.
    """

    if not days:
        return []
    wanted: set[str] = set()
    for raw in days:
        if not isinstance(raw, str):
            continue
        text = raw.strip().lower()
        for name in WEEKDAY_NAMES:
            if text == name.lower() or (len(text) >= 3 and name.lower().startswith(text)):
                wanted.add(name)
                break
    return [name for name in WEEKDAY_NAMES if name in wanted]


@dataclass
class ClassSession:
    """One scheduled class occurrence.

    ``date`` is a local calendar date; ``start_time`` and ``end_time`` are
    ``HH:MM`` wall-clock strings (empty when unknown) and ``duration`` is in
    hours. ``recurring_days`` is display metadata only.
    """

    id: str
    title: str
    date: date
    start_time: str = ""
    end_time: str = ""
    duration: float = 0.0
    subject_id: str = ""
    subject: str = ""
    tutor_name: str = ""
    student_name: str = ""
    zoom_link: str = ""
    recurring: bool = False
    recurring_days: list[str] = field(default_factory=list)
    series_id: str | None = None
    status: str = "scheduled"
    attendance: str = "pending"
    content: str = ""
    homework: str = ""
    notes: str = ""
    class_cost: float = 0.0
    tutor_cost: float = 0.0
    student_payment: str = "pending"
    tutor_payment: str = "pending"
    class_code: str = ""

    def __post_init__(self) -> None:
        self.recurring = self.recurring is True
        if self.recurring:
            self.recurring_days = normalize_weekdays(self.recurring_days)
        else:
            self.recurring_days = []

    @property
    def is_error(self) -> bool:
        return self.status == ERROR_STATUS

    @property
    def weekday(self) -> str:
        return WEEKDAY_NAMES[self.date.weekday()]

    def sort_key(self) -> tuple[date, str]:
        return (self.date, self.start_time or "")

    def copy_with(self, **changes: Any) -> "ClassSession":
        """Return a copy with ``changes`` applied (``__post_init__`` re-runs)."""

        return replace(self, **changes)


def error_session(session_id: Any, on_date: date) -> ClassSession:
    """Build the placeholder shown in place of a record that failed to map."""

    return ClassSession(
        id=str(session_id) if session_id not in (None, "") else "unknown",
        title=ERROR_PLACEHOLDER,
        date=on_date,
        subject=ERROR_PLACEHOLDER,
        tutor_name=ERROR_PLACEHOLDER,
        student_name=ERROR_PLACEHOLDER,
        status=ERROR_STATUS,
        attendance="pending",
        content="Error loading content",
        notes="Error loading class data",
    )


__all__ = [
    "ATTENDANCE_STATUSES",
    "CLASS_STATUSES",
    "ClassSession",
    "ERROR_PLACEHOLDER",
    "ERROR_STATUS",
    "PAYMENT_STATUSES",
    "WEEKDAY_NAMES",
    "coerce_choice",
    "error_session",
    "normalize_weekdays",
]
