"""Recurring-class policy for deletes, duplicates, edits and new occurrences.

Recurrence is metadata only: each occurrence of a recurring class is its
own stored session. Siblings are grouped by ``series_id`` when one exists,
and by title among recurring sessions for rows created before series ids.
"""

from __future__ import annotations

import uuid
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from tutorhub.domain import logging as domain_logging
from tutorhub.domain.class_ids import generate_class_id
from tutorhub.domain.dates import normalize_date
from tutorhub.domain.durations import calculate_end_time, parse_duration
from tutorhub.domain.entities import ClassSession, normalize_weekdays

DUPLICATE_TITLE_PREFIX = "Copy of "


def is_recurring(session: ClassSession) -> bool:
    return session.recurring is True


def describe_recurrence(session: ClassSession) -> str:
    if is_recurring(session) and session.recurring_days:
        return "Every " + ", ".join(session.recurring_days)
    if is_recurring(session):
        return "Recurring"
    return "One-time class"


def _same_series(candidate: ClassSession, target: ClassSession) -> bool:
    if not is_recurring(candidate):
        return False
    if target.series_id:
        return candidate.series_id == target.series_id
    return candidate.title == target.title


def select_delete_targets(
    sessions: Iterable[ClassSession],
    target: ClassSession,
    *,
    is_recurring: bool,
) -> List[str]:
    """Return the ids a delete of ``target`` should remove.

    ``is_recurring`` comes from the caller (the "delete all recurring"
    action), not from the record itself.
    """

    if not is_recurring:
        return [target.id]

    siblings = [session for session in sessions if _same_series(session, target)]
    if not target.series_id:
        people = {(s.tutor_name, s.student_name) for s in siblings}
        if len(people) > 1:
            domain_logging.warn(
                f"Recurring delete for title {target.title!r} matched {len(siblings)} sessions "
                f"across {len(people)} tutor/student pairs; titles may be shared by unrelated classes."
            )

    ids = [session.id for session in siblings]
    if target.id not in ids:
        ids.insert(0, target.id)
    return ids


def apply_delete(
    sessions: Sequence[ClassSession],
    target: ClassSession,
    *,
    is_recurring: bool,
) -> Tuple[List[ClassSession], List[str]]:
    """Return ``(remaining, removed_ids)`` for a delete of ``target``."""

    removed = set(select_delete_targets(sessions, target, is_recurring=is_recurring))
    remaining = [session for session in sessions if session.id not in removed]
    removed_ids = [session.id for session in sessions if session.id in removed]
    return remaining, removed_ids


def duplicate_session(
    session: ClassSession,
    *,
    new_id: str = "",
    title_prefix: str = DUPLICATE_TITLE_PREFIX,
) -> ClassSession:
    """Copy ``session`` as a new one-time class on the same date."""

    return session.copy_with(
        id=new_id,
        title=f"{title_prefix}{session.title}",
        recurring=False,
        recurring_days=[],
        series_id=None,
        status="scheduled",
        attendance="pending",
        class_code="",
    )


def apply_edit(session: ClassSession, **changes: Any) -> ClassSession:
    """Return ``session`` with ``changes`` applied to this one occurrence.

    The date is normalised and ``end_time`` is re-derived whenever the
    start time or duration changes.
    """

    if "date" in changes:
        changes["date"] = normalize_date(changes["date"])
    if "duration" in changes:
        changes["duration"] = parse_duration(changes["duration"])
    if "recurring_days" in changes:
        changes["recurring_days"] = normalize_weekdays(changes["recurring_days"])

    updated = session.copy_with(**changes)
    if "start_time" in changes or "duration" in changes:
        updated.end_time = calculate_end_time(updated.start_time, updated.duration)
    return updated


def new_occurrence(
    *,
    title: str,
    on_date: Any,
    start_time: str,
    duration: Any,
    tutor_name: str = "",
    student_name: str = "",
    subject: str = "",
    subject_id: Any = "",
    zoom_link: str = "",
    notes: str = "",
    recurring: bool = False,
    recurring_days: Optional[Iterable[str]] = None,
    series_id: Optional[str] = None,
    session_id: str = "",
    existing_codes: Optional[Iterable[str]] = None,
) -> ClassSession:
    """Build the session stored for one scheduled occurrence."""

    day = normalize_date(on_date)
    hours = parse_duration(duration)
    if recurring and not series_id:
        series_id = uuid.uuid4().hex
    return ClassSession(
        id=session_id,
        title=title.strip(),
        date=day,
        start_time=start_time,
        end_time=calculate_end_time(start_time, hours),
        duration=hours,
        subject_id="" if subject_id is None else str(subject_id),
        subject=subject,
        tutor_name=tutor_name,
        student_name=student_name,
        zoom_link=zoom_link,
        notes=notes,
        recurring=bool(recurring),
        recurring_days=list(recurring_days or []),
        series_id=series_id if recurring else None,
        status="scheduled",
        attendance="pending",
        class_code=(
            generate_class_id(student_name, tutor_name, day, existing_codes)
            if student_name.strip() and tutor_name.strip()
            else ""
        ),
    )


__all__ = [
    "DUPLICATE_TITLE_PREFIX",
    "apply_delete",
    "apply_edit",
    "describe_recurrence",
    "duplicate_session",
    "is_recurring",
    "new_occurrence",
    "select_delete_targets",
]
