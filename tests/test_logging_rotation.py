import logging
from logging.handlers import RotatingFileHandler

import pytest

from tutorhub import logging_setup
from tutorhub.infrastructure import log_utils

LOGGER_TAG = "TEST"


@pytest.fixture
def temp_logger(tmp_path):
    log_path = tmp_path / "tutorhub_history.log"
    logging_setup.configure_logging(log_path=log_path, force=True)
    adapter = logging_setup.get_logger(LOGGER_TAG)
    base_logger = logging.getLogger(logging_setup.LOGGER_NAME)
    try:
        yield adapter, base_logger, log_path
    finally:
        logging_setup.reset_logging()


def _flush(base_logger):
    for handler in base_logger.handlers:
        handler.flush()


def test_rotating_handler_defaults(temp_logger):
    adapter, base_logger, log_path = temp_logger
    rotating_handlers = [h for h in base_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert rotating_handlers, "Expected at least one rotating handler"
    handler = rotating_handlers[0]
    assert handler.maxBytes == logging_setup.DEFAULT_MAX_BYTES
    assert handler.backupCount == logging_setup.DEFAULT_BACKUP_COUNT
    assert handler.baseFilename == str(log_path)


def test_rotating_handler_rollover(tmp_path):
    log_path = tmp_path / "tutorhub_history.log"
    base_logger = logging.getLogger(logging_setup.LOGGER_NAME)
    logging_setup.configure_logging(
        log_path=log_path,
        force=True,
        max_bytes=512,
        backup_count=2,
    )
    adapter = logging_setup.get_logger(LOGGER_TAG)
    try:
        payload = "x" * 256
        for _ in range(10):
            adapter.info(payload)
        _flush(base_logger)
        assert log_path.exists()
        assert log_path.with_name("tutorhub_history.log.1").exists()
    finally:
        logging_setup.reset_logging()


def test_log_lines_carry_tag(temp_logger):
    adapter, base_logger, log_path = temp_logger

    log_utils.log_message("Loaded 3 class sessions.", "INFO", tag="SCHED")
    log_utils.warn("Odd record.", tag="MAP")
    _flush(base_logger)

    text = log_path.read_text(encoding="utf-8")
    assert "[INFO] [SCHED] Loaded 3 class sessions." in text
    assert "[WARNING] [MAP] Odd record." in text


def test_unknown_level_defaults_to_info(temp_logger):
    adapter, base_logger, log_path = temp_logger

    log_utils.log_message("still recorded", "LOUD", tag="SYS")
    _flush(base_logger)

    text = log_path.read_text(encoding="utf-8")
    assert "unknown log level 'LOUD'" in text
    assert "[INFO] [SYS] still recorded" in text


@pytest.mark.parametrize(
    "module_name, tag",
    [
        ("tutorhub.infrastructure.mappers.class_mapper", "MAP"),
        ("tutorhub.application.schedule_service", "SCHED"),
        ("tutorhub.infrastructure.json_store", "STORE"),
        ("tutorhub.cli.main", "CLI"),
        ("tutorhub.something_else", "GEN"),
    ],
)
def test_tag_for_module(module_name, tag):
    assert logging_setup.get_tag_for_module(module_name) == tag


def test_console_handler_is_opt_in(tmp_path, monkeypatch):
    monkeypatch.setenv("TUTORHUB_LOG_TO_CONSOLE", "true")
    logging_setup.configure_logging(log_path=tmp_path / "console.log", force=True)
    base_logger = logging.getLogger(logging_setup.LOGGER_NAME)
    try:
        stream_handlers = [
            h
            for h in base_logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(stream_handlers) == 1
    finally:
        logging_setup.reset_logging()
