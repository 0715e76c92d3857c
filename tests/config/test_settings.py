from pathlib import Path

import pytest
from pydantic import ValidationError

from tutorhub.config import config as config_module
from tutorhub.config.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TUTORHUB_LOG_LEVEL",
        "TUTORHUB_LOG_DIR",
        "UPCOMING_DAYS",
        "INCLUDE_ERROR_SESSIONS",
        "SESSIONS_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_load_without_environment() -> None:
    settings = Settings(_env_file=None)

    assert settings.UPCOMING_DAYS == 7
    assert settings.INCLUDE_ERROR_SESSIONS is True
    assert settings.TUTORHUB_LOG_LEVEL == "INFO"
    assert settings.SESSIONS_FILE == Path("sessions.json")


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UPCOMING_DAYS", "14")
    monkeypatch.setenv("INCLUDE_ERROR_SESSIONS", "false")
    monkeypatch.setenv("TUTORHUB_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.UPCOMING_DAYS == 14
    assert settings.INCLUDE_ERROR_SESSIONS is False
    assert settings.TUTORHUB_LOG_LEVEL == "DEBUG"


def test_upcoming_days_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, UPCOMING_DAYS=0)


def test_log_path_uses_configured_directory(tmp_path: Path) -> None:
    settings = Settings(_env_file=None, TUTORHUB_LOG_DIR=tmp_path / "logs")

    assert settings.log_path == tmp_path / "logs" / "tutorhub.log"
    assert (tmp_path / "logs").is_dir()


def test_log_path_falls_back_to_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    settings = Settings(_env_file=None)

    assert settings.log_path == tmp_path / "tutorhub_logs" / "tutorhub.log"


def test_get_env_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UPCOMING_DAYS", "3")
    monkeypatch.setenv("SOME_FLAG", "yes")

    assert config_module.get_env("UPCOMING_DAYS") == 3
    assert config_module.get_env("SOME_FLAG", parser=config_module._to_bool) is True
    assert config_module.get_env("MISSING_SETTING", default="fallback") == "fallback"


def test_get_env_keeps_template_on_bad_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UPCOMING_DAYS", "many")

    assert config_module.get_env("UPCOMING_DAYS") == config_module.settings.UPCOMING_DAYS
