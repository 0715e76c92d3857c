"""
Settings for the scheduling core and its CLI.

Values come from environment variables and an optional ``.env`` file at
the project root, and are exposed through the singleton ``settings``.
Every field has a default so the package imports cleanly without any
environment.
"""

import os
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

T = TypeVar("T")

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _find_env_file(start: Path) -> Path:
    """Return the nearest ``.env`` above ``start``, or where one would live.

    Without any ``.env`` the candidate sits next to the first
    ``pyproject.toml`` found; pydantic-settings ignores missing files.
    """

    parents = list(start.parents)
    existing = next((p / ".env" for p in parents if (p / ".env").exists()), None)
    if existing is not None:
        return existing
    project = next((p for p in parents if (p / "pyproject.toml").exists()), parents[-1])
    return project / ".env"


ENV_FILE_PATH = _find_env_file(Path(__file__).resolve())
PROJECT_DIR = ENV_FILE_PATH.parent


class Settings(BaseSettings):
    """
    Validated runtime configuration.
    """
    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH, env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )

    PROJECT_ROOT: Path = PROJECT_DIR
    ENVIRONMENT: str = "development"

    # --- LOGGING ---
    TUTORHUB_LOG_LEVEL: str = "INFO"
    TUTORHUB_LOG_TO_CONSOLE: bool = False
    TUTORHUB_LOG_DIR: Optional[Path] = None

    # --- SCHEDULING ---
    UPCOMING_DAYS: int = Field(7, ge=1)
    INCLUDE_ERROR_SESSIONS: bool = True

    # --- CLI SESSION FILE ---
    SESSIONS_FILE: Path = Path("sessions.json")

    @field_validator("TUTORHUB_LOG_LEVEL")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return str(value).strip().upper() or "INFO"

    @property
    def log_path(self) -> Path:
        """
        Location of the history log.

        ``TUTORHUB_LOG_DIR`` when it is set and writable, otherwise
        ``~/tutorhub_logs``.
        """
        try:
            if self.TUTORHUB_LOG_DIR is None:
                raise PermissionError("TUTORHUB_LOG_DIR not set")
            log_dir = Path(self.TUTORHUB_LOG_DIR)
            log_dir.mkdir(parents=True, exist_ok=True)
            if not os.access(log_dir, os.W_OK):
                raise PermissionError(f"No write access to {log_dir}")
        except OSError:
            log_dir = Path.home() / "tutorhub_logs"
            log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir / "tutorhub.log"


settings = Settings()


def _to_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUTHY


def _parse_like(raw: str, template: Any) -> Any:
    """Parse ``raw`` into the type of ``template`` (the typed settings value)."""
    for kind, parse in ((bool, _to_bool), (int, int), (float, float), (Path, Path)):
        if isinstance(template, kind):
            return parse(raw)
    return raw


def get_env(
    name: str,
    default: T | None = None,
    *,
    parser: Callable[[str], T] | None = None,
) -> T | Any | None:
    """Resolve ``name`` from the live environment, then ``settings``, then ``default``.

    A raw environment value is parsed with ``parser`` when given, otherwise
    into the type of the matching settings field. An override that fails to
    parse leaves the settings value in place.
    """

    template = getattr(settings, name, None)
    raw = os.environ.get(name)
    if raw is None:
        return default if template is None else template
    if parser is not None:
        return parser(raw)
    if template is None:
        return raw
    try:
        return _parse_like(raw, template)
    except (TypeError, ValueError):
        return template
