"""Mapping utilities for converting stored class rows into ``ClassSession`` objects.

Two row layouts exist in storage: the legacy class-log sheet with
free-text capitalised columns (``"Class Number"``, ``"Time (hrs)"``) and
the snake_case tables (``class_number``, ``time_hrs``, ``start_time``).
Each layout has its own adapter; the mapper sniffs the shape and picks one.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from tutorhub.domain.dates import format_date_for_storage, normalize_date, parse_date_or_now
from tutorhub.domain.durations import (
    calculate_end_time,
    duration_between,
    parse_duration,
    parse_numeric,
    parse_start_time,
)
from tutorhub.domain.entities import (
    ATTENDANCE_STATUSES,
    CLASS_STATUSES,
    PAYMENT_STATUSES,
    ClassSession,
    coerce_choice,
    error_session,
    normalize_weekdays,
)
from tutorhub.infrastructure import log_utils

LOG_TAG = "MAP"

_STATUS_TOKEN = re.compile(r"Status:\s*([A-Za-z]+)", re.IGNORECASE)
_ATTENDANCE_TOKEN = re.compile(r"Attendance:\s*([A-Za-z]+)", re.IGNORECASE)

CHANGE_KINDS = ("INSERT", "UPDATE", "DELETE")


class ClassMappingError(ValueError):
    """Raised when a stored row cannot be converted to a ``ClassSession``."""


@dataclass(frozen=True)
class ChangeEvent:
    """A change-feed notification translated to the canonical model."""

    kind: str
    session: Optional[ClassSession] = None
    old_id: Optional[str] = None


# --- helpers -----------------------------------------------------------------


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def _to_weekdays(value: Any) -> List[str]:
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                value = []
        else:
            value = [part for part in re.split(r"[,\s]+", text) if part]
    if not isinstance(value, (list, tuple)):
        return []
    return normalize_weekdays(value)


def _status_from_notes(notes: str, pattern: re.Pattern[str], allowed: Sequence[str]) -> Optional[str]:
    match = pattern.search(notes or "")
    if not match:
        return None
    candidate = match.group(1).lower()
    return candidate if candidate in allowed else None


def _read_date(value: Any, *, today: date, record_id: str) -> date:
    """Missing dates fall back to ``today``; unreadable ones raise."""

    if value in (None, ""):
        log_utils.log_message(
            f"Record {record_id!r} has no date; placing it on {today.isoformat()}.",
            "WARN",
            tag=LOG_TAG,
        )
        return today
    return normalize_date(value)


def _record_id(record: Mapping[str, Any]) -> str:
    record_id = _text(record.get("id"))
    if not record_id:
        raise ClassMappingError("record has no id")
    return record_id


# --- adapters ----------------------------------------------------------------


class RecordAdapter(ABC):
    """Converts one storage row layout into ``ClassSession``."""

    name: str = "base"
    columns: frozenset[str] = frozenset()

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(key in self.columns for key in record)

    @abstractmethod
    def build(self, record: Mapping[str, Any], *, today: date) -> ClassSession:
        """Return the canonical session; raise on unreadable dates."""


class LegacyClassLogAdapter(RecordAdapter):
    """Rows from the class-log sheet with capitalised, spaced column names."""

    name = "legacy"
    columns = frozenset(
        {
            "Class Number",
            "Tutor Name",
            "Student Name",
            "Date",
            "Day",
            "Time (CST)",
            "Time (hrs)",
            "Subject",
            "Content",
            "HW",
            "Class ID",
            "Class Cost",
            "Tutor Cost",
            "Student Payment",
            "Tutor Payment",
            "Additional Info",
        }
    )

    def build(self, record: Mapping[str, Any], *, today: date) -> ClassSession:
        record_id = _record_id(record)
        session_date = _read_date(record.get("Date"), today=today, record_id=record_id)

        start_time = parse_start_time(record.get("Time (CST)"))
        duration = parse_duration(record.get("Time (hrs)"))
        notes = _text(record.get("Additional Info"))

        return ClassSession(
            id=record_id,
            title=_text(record.get("Class Number")),
            date=session_date,
            start_time=start_time,
            end_time=calculate_end_time(start_time, duration),
            duration=duration,
            subject=_text(record.get("Subject")),
            tutor_name=_text(record.get("Tutor Name")),
            student_name=_text(record.get("Student Name")),
            status=_status_from_notes(notes, _STATUS_TOKEN, CLASS_STATUSES) or "completed",
            attendance=_status_from_notes(notes, _ATTENDANCE_TOKEN, ATTENDANCE_STATUSES) or "present",
            content=_text(record.get("Content")),
            homework=_text(record.get("HW")),
            notes=notes,
            class_cost=parse_numeric(record.get("Class Cost")),
            tutor_cost=parse_numeric(record.get("Tutor Cost")),
            student_payment=coerce_choice(record.get("Student Payment"), PAYMENT_STATUSES, "pending"),
            tutor_payment=coerce_choice(record.get("Tutor Payment"), PAYMENT_STATUSES, "pending"),
            class_code=_text(record.get("Class ID")),
        )


class SnakeCaseClassAdapter(RecordAdapter):
    """Rows from the snake_case class tables (scheduled classes and code logs)."""

    name = "snake_case"
    columns = frozenset(
        {
            "class_number",
            "title",
            "tutor_name",
            "student_name",
            "date",
            "time_cst",
            "time_hrs",
            "start_time",
            "end_time",
            "duration",
            "subject",
            "subject_id",
            "zoom_link",
            "status",
            "attendance",
            "recurring",
            "recurring_days",
            "series_id",
            "class_cost",
            "tutor_cost",
        }
    )

    def build(self, record: Mapping[str, Any], *, today: date) -> ClassSession:
        record_id = _record_id(record)
        session_date = _read_date(record.get("date"), today=today, record_id=record_id)

        start_time = parse_start_time(_first(record, "start_time", "time_cst"))
        duration = parse_duration(_first(record, "time_hrs", "duration"))
        if duration <= 0:
            duration = duration_between(start_time, parse_start_time(record.get("end_time")))

        notes = _text(_first(record, "notes", "additional_info"))
        status = coerce_choice(record.get("status"), CLASS_STATUSES, "")
        attendance = coerce_choice(record.get("attendance"), ATTENDANCE_STATUSES, "")
        recurring = _to_bool(record.get("recurring"))
        subject_id = record.get("subject_id")

        return ClassSession(
            id=record_id,
            title=_text(_first(record, "title", "class_number")),
            date=session_date,
            start_time=start_time,
            end_time=calculate_end_time(start_time, duration),
            duration=duration,
            subject_id=_text(subject_id),
            subject=_text(record.get("subject")),
            tutor_name=_text(record.get("tutor_name")),
            student_name=_text(record.get("student_name")),
            zoom_link=_text(record.get("zoom_link")),
            recurring=recurring,
            recurring_days=_to_weekdays(record.get("recurring_days")) if recurring else [],
            series_id=_text(record.get("series_id")) or None,
            status=status or _status_from_notes(notes, _STATUS_TOKEN, CLASS_STATUSES) or "scheduled",
            attendance=attendance
            or _status_from_notes(notes, _ATTENDANCE_TOKEN, ATTENDANCE_STATUSES)
            or "pending",
            content=_text(record.get("content")),
            homework=_text(_first(record, "homework", "hw")),
            notes=notes,
            class_cost=parse_numeric(record.get("class_cost")),
            tutor_cost=parse_numeric(record.get("tutor_cost")),
            student_payment=coerce_choice(record.get("student_payment"), PAYMENT_STATUSES, "pending"),
            tutor_payment=coerce_choice(record.get("tutor_payment"), PAYMENT_STATUSES, "pending"),
            class_code=_text(record.get("class_id")),
        )


ADAPTERS: tuple[RecordAdapter, ...] = (LegacyClassLogAdapter(), SnakeCaseClassAdapter())


# --- mapper ------------------------------------------------------------------


@dataclass
class ClassRecordMapper:
    """Translate between stored rows and ``ClassSession`` objects."""

    adapters: Sequence[RecordAdapter] = field(default_factory=lambda: list(ADAPTERS))

    def adapter_for(self, record: Mapping[str, Any]) -> RecordAdapter:
        for adapter in self.adapters:
            if adapter.matches(record):
                return adapter
        raise ClassMappingError(f"unrecognised record shape: {sorted(record)!r}")

    def to_class_session(self, raw: Any, *, today: date | None = None) -> ClassSession:
        """Map one row; a row that cannot be read becomes an error session."""

        reference = today or date.today()
        if not isinstance(raw, Mapping):
            log_utils.log_message(f"Invalid record format: {raw!r}", "ERROR", tag=LOG_TAG)
            return error_session("unknown", reference)

        try:
            return self.adapter_for(raw).build(raw, today=reference)
        except (ArithmeticError, TypeError, ValueError) as exc:
            record_id = raw.get("id")
            log_utils.log_message(
                f"Error transforming record {record_id!r}: {exc}", "ERROR", tag=LOG_TAG
            )
            raw_date = _first(raw, "Date", "date")
            fallback_date = parse_date_or_now(
                raw_date if raw_date is not None else reference,
                today=reference,
                context=f"record {record_id!r}",
            )
            return error_session(record_id, fallback_date)

    def to_class_sessions(
        self, rows: Iterable[Any], *, today: date | None = None
    ) -> List[ClassSession]:
        return [self.to_class_session(row, today=today) for row in rows]

    def to_record(self, session: ClassSession) -> Dict[str, Any]:
        """Return the snake_case row persisted for ``session``."""

        return {
            "id": session.id,
            "title": session.title,
            "subject": session.subject,
            "subject_id": session.subject_id,
            "tutor_name": session.tutor_name,
            "student_name": session.student_name,
            "date": format_date_for_storage(session.date),
            "day": session.weekday,
            "start_time": session.start_time,
            "end_time": calculate_end_time(session.start_time, session.duration),
            "duration": session.duration,
            "zoom_link": session.zoom_link or None,
            "recurring": session.recurring,
            "recurring_days": list(session.recurring_days),
            "series_id": session.series_id,
            "status": session.status,
            "attendance": session.attendance,
            "content": session.content,
            "homework": session.homework,
            "notes": session.notes or None,
            "class_cost": session.class_cost,
            "tutor_cost": session.tutor_cost,
            "student_payment": session.student_payment,
            "tutor_payment": session.tutor_payment,
            "class_id": session.class_code,
        }

    def from_change_payload(
        self, payload: Mapping[str, Any], *, today: date | None = None
    ) -> ChangeEvent:
        """Translate a realtime change payload (``eventType``, ``new``, ``old``)."""

        if not isinstance(payload, Mapping):
            raise ClassMappingError("change payload must be a mapping")

        kind = _text(_first(payload, "eventType", "type")).upper()
        if kind not in CHANGE_KINDS:
            raise ClassMappingError(f"unknown change type {kind!r}")

        old = payload.get("old") or {}
        old_id = _text(old.get("id")) if isinstance(old, Mapping) else ""

        if kind == "DELETE":
            if not old_id:
                raise ClassMappingError("delete payload has no old id")
            return ChangeEvent(kind=kind, old_id=old_id)

        session = self.to_class_session(payload.get("new"), today=today)
        return ChangeEvent(kind=kind, session=session, old_id=old_id or None)


__all__ = [
    "ADAPTERS",
    "ChangeEvent",
    "ClassMappingError",
    "ClassRecordMapper",
    "LegacyClassLogAdapter",
    "RecordAdapter",
    "SnakeCaseClassAdapter",
]
