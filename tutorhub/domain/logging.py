"""Standard-library logging for the pure scheduling core.

Domain modules log to ``tutorhub.domain`` and never touch the rotating
history file; the host application decides where those records go.
"""
from __future__ import annotations

import logging

DOMAIN_LOGGER_NAME = "tutorhub.domain"

_logger = logging.getLogger(DOMAIN_LOGGER_NAME)


def warn(message: str) -> None:
    _logger.warning(message)
