"""JSON-file implementation of :class:`SessionRepository`."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from tutorhub.domain.repositories import SessionRepository
from tutorhub.infrastructure.log_utils import log_message


class JsonSessionStore(SessionRepository):
    """Persist raw class records as a JSON array on disk.

    A missing file reads as an empty schedule. Records are keyed by their
    ``id``; saving a record with a known id replaces it in place.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_records(self) -> List[Dict[str, Any]]:
        if not self._path.exists():
            log_message(f"No session file at {self._path}; starting empty.", "DEBUG", tag="STORE")
            return []

        with self._path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{self._path} is not valid JSON: {exc}") from exc

        if isinstance(data, dict) and isinstance(data.get("sessions"), list):
            data = data["sessions"]
        if not isinstance(data, list):
            raise ValueError(f"{self._path} must contain a JSON array of class records")

        log_message(f"Read {len(data)} records from {self._path}.", "DEBUG", tag="STORE")
        return list(data)

    def save_record(self, record: Mapping[str, Any]) -> None:
        record_id = record.get("id")
        if record_id in (None, ""):
            raise ValueError("Cannot store a class record without an id")

        records = self.load_records()
        for index, existing in enumerate(records):
            if isinstance(existing, Mapping) and existing.get("id") == record_id:
                records[index] = dict(record)
                break
        else:
            records.append(dict(record))
        self._write(records)

    def delete_records(self, ids: Iterable[str]) -> int:
        doomed = set(ids)
        if not doomed:
            return 0
        records = self.load_records()
        kept = [r for r in records if not (isinstance(r, Mapping) and r.get("id") in doomed)]
        removed = len(records) - len(kept)
        if removed:
            self._write(kept)
        log_message(f"Removed {removed} records from {self._path}.", tag="STORE")
        return removed

    def _write(self, records: List[Dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, indent=2, default=str)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


__all__ = ["JsonSessionStore"]
