from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping


class SessionRepository(ABC):
    """Abstract interface for class-session persistence."""

    @abstractmethod
    def load_records(self) -> List[Dict[str, Any]]:
        """Return every stored raw session record."""

    @abstractmethod
    def save_record(self, record: Mapping[str, Any]) -> None:
        """Insert or replace a record keyed by its ``id``."""

    @abstractmethod
    def delete_records(self, ids: Iterable[str]) -> int:
        """Delete the records with the given ids and return how many went."""
