"""Exception hierarchy for the scheduling application layer."""

from __future__ import annotations

from typing import Sequence

from tutorhub.domain.class_validation import ValidationIssue, format_validation_errors


class ApplicationError(Exception):
    """Base exception for application-level failures."""


class SessionNotFoundError(ApplicationError):
    """Raised when an operation targets a session id that is not loaded."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No class session with id {session_id!r}")
        self.session_id = session_id


class ChangeFeedError(ApplicationError):
    """Raised when a change-feed payload cannot be applied."""


class SchedulingValidationError(ApplicationError):
    """Raised when a class cannot be scheduled or edited as requested."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__(format_validation_errors(self.issues))


class DataAccessError(ApplicationError):
    """Raised when the session store cannot be read or written."""


__all__ = [
    "ApplicationError",
    "ChangeFeedError",
    "DataAccessError",
    "SchedulingValidationError",
    "SessionNotFoundError",
]
