"""
High-level service coordinating the scheduling core with storage and the change feed.

The service keeps a snapshot list of canonical sessions. Every view call
runs the pure placement functions over the current snapshot, so callers
only need to re-query after a load or change.
"""

from __future__ import annotations

import calendar
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from tutorhub.application.exceptions import (
    ChangeFeedError,
    DataAccessError,
    SchedulingValidationError,
    SessionNotFoundError,
)
from tutorhub.domain import recurrence, scheduler
from tutorhub.domain.class_validation import (
    END_BEFORE_START,
    ValidationIssue,
    validate_class_creation,
    validate_class_edit,
)
from tutorhub.domain.durations import calculate_end_time, duration_between, parse_duration
from tutorhub.domain.entities import ClassSession
from tutorhub.domain.repositories import SessionRepository
from tutorhub.infrastructure import log_utils
from tutorhub.infrastructure.mappers import ClassMappingError, ClassRecordMapper

LOG_TAG = "SCHED"
TIME_FIELDS = frozenset({"start_time", "end_time", "duration"})
TIME_ISSUE_FIELDS = frozenset({"start_time", "end_time", "time"})


def _end_time_from_duration(session: ClassSession) -> bool:
    return session.duration > 0 and session.end_time == calculate_end_time(
        session.start_time, session.duration
    )


class ScheduleService:
    """Service answering calendar views and applying class mutations."""

    def __init__(
        self,
        repository: SessionRepository | None = None,
        mapper: ClassRecordMapper | None = None,
    ):
        self.repository = repository
        self.mapper = mapper or ClassRecordMapper()
        self._sessions: List[ClassSession] = []

    # --- snapshot ----------------------------------------------------------------

    @property
    def sessions(self) -> List[ClassSession]:
        return list(self._sessions)

    def load(self, rows: Iterable[Any] | None = None, *, today: date | None = None) -> List[ClassSession]:
        """Replace the snapshot with ``rows`` (or the repository's rows)."""

        if rows is None:
            if self.repository is None:
                raise DataAccessError("No rows given and no repository configured")
            try:
                rows = self.repository.load_records()
            except (OSError, ValueError) as exc:
                raise DataAccessError(f"Could not load class records: {exc}") from exc

        self._sessions = self.mapper.to_class_sessions(rows, today=today)
        errors = sum(1 for session in self._sessions if session.is_error)
        log_utils.log_message(
            f"Loaded {len(self._sessions)} class sessions ({errors} unreadable).",
            "WARN" if errors else "INFO",
            tag=LOG_TAG,
        )
        return self.sessions

    def get(self, session_id: str) -> ClassSession:
        for session in self._sessions:
            if session.id == session_id:
                return session
        raise SessionNotFoundError(session_id)

    def apply_change(self, payload: Mapping[str, Any], *, today: date | None = None) -> ClassSession | None:
        """Merge one change-feed payload into the snapshot.

        Returns the inserted/updated session, or ``None`` for deletes.
        """

        try:
            event = self.mapper.from_change_payload(payload, today=today)
        except ClassMappingError as exc:
            raise ChangeFeedError(str(exc)) from exc

        if event.kind == "DELETE":
            before = len(self._sessions)
            self._sessions = [s for s in self._sessions if s.id != event.old_id]
            if len(self._sessions) == before:
                log_utils.log_message(
                    f"Delete for unknown session {event.old_id!r} ignored.", "DEBUG", tag=LOG_TAG
                )
            return None

        session = event.session
        if session is None:
            raise ChangeFeedError(f"{event.kind} payload carried no class record")
        for index, existing in enumerate(self._sessions):
            if existing.id == session.id:
                self._sessions[index] = session
                return session
        self._sessions.append(session)
        return session

    # --- views -------------------------------------------------------------------

    def day_view(self, day: Any, *, include_recurring_weekdays: bool = False) -> List[ClassSession]:
        return scheduler.sessions_on_date(
            self._sessions, day, include_recurring_weekdays=include_recurring_weekdays
        )

    def upcoming(self, days_to_show: Optional[int] = None, *, today: Any = None) -> List[ClassSession]:
        return scheduler.upcoming_sessions(self._sessions, days_to_show, today=today)

    def month_markers(self, year: int, month: int) -> Dict[date, bool]:
        """Return ``{day: has_sessions}`` for every day of the month."""

        last_day = calendar.monthrange(year, month)[1]
        by_day = scheduler.sessions_by_day(
            self._sessions, date(year, month, 1), date(year, month, last_day)
        )
        return {day: bool(sessions) for day, sessions in by_day.items()}

    # --- mutations ---------------------------------------------------------------

    def delete(self, session_id: str, *, is_recurring: bool = False) -> List[str]:
        """Delete one session, or every occurrence of its recurring series."""

        target = self.get(session_id)
        remaining, removed_ids = recurrence.apply_delete(
            self._sessions, target, is_recurring=is_recurring
        )
        if self.repository is not None:
            try:
                self.repository.delete_records(removed_ids)
            except (OSError, ValueError) as exc:
                raise DataAccessError(f"Could not delete classes {removed_ids}: {exc}") from exc
        self._sessions = remaining
        log_utils.log_message(
            f"Deleted {len(removed_ids)} session(s) for {session_id!r} (recurring={is_recurring}).",
            tag=LOG_TAG,
        )
        return removed_ids

    def duplicate(self, session_id: str) -> ClassSession:
        copy = recurrence.duplicate_session(self.get(session_id), new_id=uuid.uuid4().hex)
        self._persist(copy)
        self._sessions.append(copy)
        return copy

    def edit(self, session_id: str, **changes: Any) -> ClassSession:
        """Update a single occurrence; other occurrences of its series are untouched.

        Time checks only run when the start, end or duration is changed, and an
        end time derived past midnight from the duration is accepted.
        """

        original = self.get(session_id)
        updated = recurrence.apply_edit(original, **changes)
        issues = validate_class_edit(
            {
                "id": updated.id,
                "title": updated.title,
                "subject": updated.subject or updated.title,
                "date": updated.date,
                "start_time": updated.start_time,
                "end_time": updated.end_time,
                "zoom_link": updated.zoom_link,
            }
        )
        if not TIME_FIELDS.intersection(changes):
            issues = [issue for issue in issues if issue.field not in TIME_ISSUE_FIELDS]
        elif _end_time_from_duration(updated):
            issues = [issue for issue in issues if issue.message != END_BEFORE_START]
        if issues:
            raise SchedulingValidationError(issues)
        self._persist(updated)
        self._sessions = [updated if s.id == session_id else s for s in self._sessions]
        return updated

    def schedule(self, request: Mapping[str, Any]) -> ClassSession:
        """Validate a new-class request and store its single occurrence.

        ``request`` uses snake_case keys: ``title``, ``subject``, ``date``,
        ``start_time``, ``duration``, ``student_id``, ``relationship_id``
        plus the optional display and recurrence fields.
        """

        issues = self._creation_issues(request)
        if issues:
            raise SchedulingValidationError(issues)

        duration = request.get("duration")
        if parse_duration(duration) <= 0:
            duration = duration_between(request.get("start_time"), request.get("end_time"))

        session = recurrence.new_occurrence(
            title=str(request.get("title") or ""),
            on_date=request.get("date") or date.today(),
            start_time=str(request.get("start_time") or ""),
            duration=duration,
            tutor_name=str(request.get("tutor_name") or ""),
            student_name=str(request.get("student_name") or ""),
            subject=str(request.get("subject") or ""),
            subject_id=request.get("subject_id"),
            zoom_link=str(request.get("zoom_link") or ""),
            notes=str(request.get("notes") or ""),
            recurring=bool(request.get("recurring")),
            recurring_days=request.get("recurring_days"),
            series_id=request.get("series_id"),
            session_id=str(request.get("id") or uuid.uuid4().hex),
            existing_codes=[s.class_code for s in self._sessions if s.class_code],
        )

        self._persist(session)
        self._sessions.append(session)
        log_utils.log_message(
            f"Scheduled {session.title!r} on {session.date.isoformat()} at {session.start_time}.",
            tag=LOG_TAG,
        )
        return session

    # --- helpers -----------------------------------------------------------------

    def _creation_issues(self, request: Mapping[str, Any]) -> List[ValidationIssue]:
        payload = dict(request)
        if not payload.get("end_time"):
            payload["end_time"] = calculate_end_time(
                payload.get("start_time"), payload.get("duration")
            )
        return validate_class_creation(payload)

    def _persist(self, session: ClassSession) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save_record(self.mapper.to_record(session))
        except (OSError, ValueError) as exc:
            raise DataAccessError(f"Could not save class {session.id!r}: {exc}") from exc
