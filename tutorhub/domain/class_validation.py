"""Field validation for scheduling, editing and completing classes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping
from urllib.parse import urlparse

from tutorhub.domain.dates import try_normalize_date
from tutorhub.domain.durations import split_hh_mm

MIN_COMPLETION_CONTENT = 10
END_BEFORE_START = "End time must be after start time"


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme in ("http", "https") and parsed.netloc)


def validate_class_creation(data: Mapping[str, Any]) -> List[ValidationIssue]:
    """Return the problems with a new-class payload (empty when valid)."""

    issues: List[ValidationIssue] = []

    if not _text(data, "title"):
        issues.append(ValidationIssue("title", "Class title is required"))
    if not _text(data, "subject"):
        issues.append(ValidationIssue("subject", "Subject is required"))
    if not data.get("student_id"):
        issues.append(ValidationIssue("student_id", "Student selection is required"))
    if not data.get("relationship_id"):
        issues.append(ValidationIssue("relationship_id", "Valid student relationship is required"))

    start_time = _text(data, "start_time")
    end_time = _text(data, "end_time")
    if not start_time:
        issues.append(ValidationIssue("start_time", "Start time is required"))
    if not end_time:
        issues.append(ValidationIssue("end_time", "End time is required"))

    raw_date = data.get("date")
    if raw_date in (None, ""):
        issues.append(ValidationIssue("date", "Date is required"))
    elif not try_normalize_date(raw_date).ok:
        issues.append(ValidationIssue("date", "Invalid date"))

    if start_time and end_time:
        start = split_hh_mm(start_time)
        end = split_hh_mm(end_time)
        if start is None or end is None:
            issues.append(ValidationIssue("time", "Invalid time format"))
        elif end <= start:
            issues.append(ValidationIssue("end_time", END_BEFORE_START))

    zoom_link = _text(data, "zoom_link")
    if zoom_link and not _is_url(zoom_link):
        issues.append(ValidationIssue("zoom_link", "Please enter a valid URL"))

    return issues


def validate_class_edit(data: Mapping[str, Any]) -> List[ValidationIssue]:
    """Creation rules minus the student fields, plus a required id."""

    issues: List[ValidationIssue] = []
    if not data.get("id"):
        issues.append(ValidationIssue("id", "Class ID is required for editing"))
    issues.extend(
        issue
        for issue in validate_class_creation(data)
        if issue.field not in ("student_id", "relationship_id")
    )
    return issues


def validate_class_completion(data: Mapping[str, Any], content: str) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    text = (content or "").strip()
    if not text:
        issues.append(ValidationIssue("content", "Class content description is required"))
    elif len(text) < MIN_COMPLETION_CONTENT:
        issues.append(
            ValidationIssue(
                "content",
                f"Please provide a more detailed description (at least {MIN_COMPLETION_CONTENT} characters)",
            )
        )
    if not data.get("tutor_id"):
        issues.append(ValidationIssue("tutor_id", "Tutor information is missing"))
    if not data.get("student_id"):
        issues.append(ValidationIssue("student_id", "Student information is missing"))
    return issues


def format_validation_errors(issues: List[ValidationIssue]) -> str:
    if not issues:
        return ""
    if len(issues) == 1:
        return issues[0].message
    return "Please fix the following issues:\n" + "\n".join(f"• {issue.message}" for issue in issues)


__all__ = [
    "END_BEFORE_START",
    "ValidationIssue",
    "format_validation_errors",
    "validate_class_completion",
    "validate_class_creation",
    "validate_class_edit",
]
