"""Human-readable class codes: ``{student}-{tutor}-{YYYYMMDD}-{sequence}``.

Example: ``SM-JD-20241119-1``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from tutorhub.domain.dates import normalize_date

_CLASS_ID_PATTERN = re.compile(r"^[A-Z]{2}-[A-Z]{2}-\d{8}-\d+$")


@dataclass(frozen=True)
class ClassIdParts:
    student_initials: str
    tutor_initials: str
    date: str
    sequence: int


def get_initials(name: str) -> str:
    """First letters of the first and last name, or the first two letters of a single name."""

    cleaned = (name or "").strip()
    parts = cleaned.split()
    if len(parts) <= 1:
        return cleaned[:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def format_date_for_id(value: Any) -> str:
    return normalize_date(value).strftime("%Y%m%d")


def _next_sequence(base_id: str, existing_ids: Iterable[str]) -> int:
    pattern = re.compile(rf"^{re.escape(base_id)}-(\d+)$")
    sequences = [
        int(match.group(1))
        for match in (pattern.match(str(existing)) for existing in existing_ids)
        if match and int(match.group(1)) > 0
    ]
    return max(sequences) + 1 if sequences else 1


def generate_class_id(
    student_name: str,
    tutor_name: str,
    on_date: Any,
    existing_ids: Optional[Iterable[str]] = None,
) -> str:
    """Return the next free class code for this student, tutor and date."""

    base_id = (
        f"{get_initials(student_name)}-{get_initials(tutor_name)}-{format_date_for_id(on_date)}"
    )
    return f"{base_id}-{_next_sequence(base_id, existing_ids or [])}"


def is_valid_class_id(value: str) -> bool:
    return bool(_CLASS_ID_PATTERN.match(value or ""))


def parse_class_id(value: str) -> Optional[ClassIdParts]:
    if not is_valid_class_id(value):
        return None
    student, tutor, day, sequence = value.split("-")
    return ClassIdParts(
        student_initials=student,
        tutor_initials=tutor,
        date=day,
        sequence=int(sequence),
    )


__all__ = [
    "ClassIdParts",
    "format_date_for_id",
    "generate_class_id",
    "get_initials",
    "is_valid_class_id",
    "parse_class_id",
]
