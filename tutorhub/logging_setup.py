"""History log for the scheduling service and CLI.

All application and infrastructure messages go to one rotating file,
``tutorhub.log``, with a short tag per line naming the subsystem
(``SCHED``, ``MAP``, ``STORE``, ``CLI``, ``SYS``). A console copy is
written only when ``TUTORHUB_LOG_TO_CONSOLE`` is switched on.
"""

from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from tutorhub.config import get_env, settings

LOGGER_NAME = "tutorhub.history"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 7
DEFAULT_TAG = "GEN"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(tag)s] %(message)s"

# Substring of the module path -> tag. First match wins.
TAG_MAP = {
    "mapper": "MAP",
    "schedule_service": "SCHED",
    "scheduler": "SCHED",
    "recurrence": "SCHED",
    "json_store": "STORE",
    "cli": "CLI",
    "container": "SYS",
}

_history: Optional[logging.Logger] = None


class TaggedLogger(logging.LoggerAdapter):
    """Adapter stamping every record with the subsystem tag used by the formatter."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("tag", self.extra.get("tag", DEFAULT_TAG))
        kwargs["extra"] = extra
        return msg, kwargs


def _level_from(name: Optional[str]) -> int:
    wanted = str(name or get_env("TUTORHUB_LOG_LEVEL", default=settings.TUTORHUB_LOG_LEVEL)).upper()
    numeric = logging.getLevelName(wanted)
    if isinstance(numeric, int):
        return numeric
    print(f"tutorhub logger: unknown log level '{wanted}', using INFO.", file=sys.stderr)
    return logging.INFO


def _utc_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    formatter.converter = time.gmtime
    return formatter


def _console_enabled() -> bool:
    return str(get_env("TUTORHUB_LOG_TO_CONSOLE", default=False)).strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }


def _attach_file_handler(
    logger: logging.Logger,
    path: Path,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int,
) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as exc:
        print(f"tutorhub logger: cannot open {path}: {exc}", file=sys.stderr)
        return
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def configure_logging(
    *,
    log_path: Optional[Path] = None,
    level: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    force: bool = False,
) -> logging.Logger:
    """Return the history logger, attaching its handlers on first use.

    Once configured, later calls only adjust ``level`` unless ``force`` is
    set or a new ``log_path`` is given, in which case the handlers are
    rebuilt.
    """
    global _history
    logger = logging.getLogger(LOGGER_NAME)

    if _history is not None and not force and log_path is None:
        if level is not None:
            logger.setLevel(_level_from(level))
        return logger

    _drop_handlers(logger)
    logger.setLevel(_level_from(level))
    formatter = _utc_formatter()

    _attach_file_handler(
        logger,
        Path(log_path) if log_path is not None else settings.log_path,
        formatter,
        max_bytes or DEFAULT_MAX_BYTES,
        backup_count or DEFAULT_BACKUP_COUNT,
    )
    if _console_enabled():
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    logger.propagate = False
    _history = logger
    return logger


def get_tag_for_module(module_name: str) -> str:
    lowered = module_name.lower()
    return next((tag for key, tag in TAG_MAP.items() if key in lowered), DEFAULT_TAG)


def get_logger(tag: str | None = None) -> TaggedLogger:
    """Return the history logger wrapped with ``tag`` (``GEN`` when omitted)."""
    base = _history if _history is not None else configure_logging()
    return TaggedLogger(base, {"tag": tag or DEFAULT_TAG})


def reset_logging() -> None:
    """Close the history handlers so the next call reconfigures from scratch."""
    global _history
    _drop_handlers(logging.getLogger(LOGGER_NAME))
    _history = None
