"""Runtime knobs for the scheduling core, set by the host process at start-up."""
from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class DomainSettings:
    """Values the placement engine reads at call time.

    ``upcoming_days`` is the default length of the upcoming window.
    ``include_error_sessions`` decides whether records that failed to map
    still appear in the day and upcoming views.
    """

    upcoming_days: int = 7
    include_error_sessions: bool = True

    def __post_init__(self) -> None:
        if self.upcoming_days < 1:
            raise ValueError("upcoming_days must be at least 1")


_DEFAULTS = DomainSettings()
_active = _DEFAULTS


def configure(settings: DomainSettings | None = None, /, **overrides: object) -> DomainSettings:
    """Install ``settings`` (or the current values) with ``overrides`` applied.

    The DI container seeds this from the environment; tests call it with
    single keyword overrides.
    """

    global _active
    base = settings if settings is not None else _active
    _active = replace(base, **overrides) if overrides else base
    return _active


def get_settings() -> DomainSettings:
    return _active


def reset() -> None:
    global _active
    _active = _DEFAULTS
