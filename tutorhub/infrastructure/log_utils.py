"""Write tagged lines to the tutorhub history log."""

from __future__ import annotations

import logging
import sys
from typing import Any

from tutorhub.logging_setup import get_logger, get_tag_for_module

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _caller_tag(depth: int) -> str:
    module_name = sys._getframe(depth + 1).f_globals.get("__name__", "")
    return get_tag_for_module(module_name)


def log_message(msg: str, level: str = "INFO", tag: str | None = None, **kwargs: Any) -> None:
    """Log ``msg`` at ``level`` under ``tag``.

    Without a tag one is inferred from the calling module's path, so the
    mapper logs as ``MAP`` and the schedule service as ``SCHED``. Keyword
    arguments such as ``exc_info=True`` are passed through to logging.
    """
    logger = get_logger(tag or _caller_tag(1))
    numeric = LEVELS.get(str(level).upper())
    if numeric is None:
        logger.warning("Received unknown log level '%s'; logging at INFO: %s", level, msg)
        numeric = logging.INFO
    logger.log(numeric, msg, **kwargs)


def warn(msg: str, tag: str | None = None, **kwargs: Any) -> None:
    log_message(msg, "WARNING", tag or _caller_tag(1), **kwargs)
