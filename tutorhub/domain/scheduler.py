"""Session placement: day view, upcoming window and calendar markers."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from tutorhub.domain import logging as domain_logging
from tutorhub.domain.configuration import get_settings
from tutorhub.domain.dates import normalize_date, parse_date_or_now, same_local_day, start_of_day
from tutorhub.domain.entities import ClassSession, WEEKDAY_NAMES


def _session_day(session: ClassSession, today: date | None = None) -> date:
    return parse_date_or_now(session.date, today=today, context=f"session {session.id!r}")


def _visible(session: ClassSession) -> bool:
    if not session.is_error:
        return True
    if not get_settings().include_error_sessions:
        return False
    domain_logging.warn(
        f"Placing error session {session.id!r}; its stored record could not be read."
    )
    return True


def _falls_on(session: ClassSession, day: date, include_recurring_weekdays: bool) -> bool:
    if same_local_day(_session_day(session), day):
        return True
    if include_recurring_weekdays and session.recurring and session.recurring_days:
        return WEEKDAY_NAMES[day.weekday()] in session.recurring_days
    return False


def sessions_on_date(
    sessions: Iterable[ClassSession],
    day: Any,
    *,
    include_recurring_weekdays: bool = False,
) -> List[ClassSession]:
    """Return the sessions whose calendar date is ``day``, in input order.

    With ``include_recurring_weekdays`` a recurring session is also placed on
    every weekday listed in its ``recurring_days``.
    """

    target = normalize_date(day)
    return [
        session
        for session in sessions
        if _falls_on(session, target, include_recurring_weekdays) and _visible(session)
    ]


def has_session_on_date(
    sessions: Iterable[ClassSession],
    day: Any,
    *,
    include_recurring_weekdays: bool = False,
) -> bool:
    return bool(
        sessions_on_date(sessions, day, include_recurring_weekdays=include_recurring_weekdays)
    )


def upcoming_sessions(
    sessions: Iterable[ClassSession],
    days_to_show: Optional[int] = None,
    *,
    today: Any = None,
) -> List[ClassSession]:
    """Return sessions in ``[today, today + days_to_show)`` ordered soonest first.

    Both ends are compared at start of day, so anything on the current date
    is included whatever its start time. Ties are ordered by start time and
    then by input order.
    """

    days = get_settings().upcoming_days if days_to_show is None else int(days_to_show)
    window_start = start_of_day(today)
    window_end = window_start + timedelta(days=days)

    selected = [
        (_session_day(session, window_start), session)
        for session in sessions
    ]
    selected = [
        (day, session)
        for day, session in selected
        if window_start <= day < window_end and _visible(session)
    ]
    selected.sort(key=lambda item: (item[0], item[1].start_time or ""))
    return [session for _, session in selected]


def sessions_by_day(
    sessions: Iterable[ClassSession],
    start: Any,
    end: Any,
    *,
    include_recurring_weekdays: bool = False,
) -> Dict[date, List[ClassSession]]:
    """Map every day in ``[start, end]`` to its sessions (month calendar)."""

    first = normalize_date(start)
    last = normalize_date(end)
    snapshot = list(sessions)
    calendar: Dict[date, List[ClassSession]] = {}
    current = first
    while current <= last:
        calendar[current] = sessions_on_date(
            snapshot, current, include_recurring_weekdays=include_recurring_weekdays
        )
        current += timedelta(days=1)
    return calendar


__all__ = [
    "has_session_on_date",
    "sessions_by_day",
    "sessions_on_date",
    "upcoming_sessions",
]
