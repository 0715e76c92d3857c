import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tutorhub import logging_setup  # noqa: E402
from tutorhub.domain import configuration as domain_configuration  # noqa: E402
from tutorhub.domain.entities import ClassSession  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    """Send the history log to a temp file and reset domain settings per test."""
    monkeypatch.delenv("TUTORHUB_LOG_TO_CONSOLE", raising=False)
    log_path = tmp_path / "logs" / "tutorhub.log"
    logging_setup.configure_logging(log_path=log_path, force=True)
    domain_configuration.reset()
    try:
        yield log_path
    finally:
        logging_setup.reset_logging()
        domain_configuration.reset()


@pytest.fixture
def make_session():
    """Factory for ``ClassSession`` objects with sensible defaults."""

    def _make(session_id: str = "s1", on: date = date(2025, 6, 2), **overrides) -> ClassSession:
        values = {
            "id": session_id,
            "title": "Algebra",
            "date": on,
            "start_time": "14:00",
            "end_time": "15:30",
            "duration": 1.5,
            "tutor_name": "Jane Doe",
            "student_name": "Sam Miller",
        }
        values.update(overrides)
        return ClassSession(**values)

    return _make


@pytest.fixture
def history_log(isolated_logging):
    """Return a callable reading the flushed history log."""

    def _read() -> str:
        logger = logging_setup.configure_logging()
        for handler in logger.handlers:
            handler.flush()
        return isolated_logging.read_text(encoding="utf-8") if isolated_logging.exists() else ""

    return _read
