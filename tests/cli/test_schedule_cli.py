import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from tutorhub.cli import main as cli_main

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli_main, "console", Console(width=300))


@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "sessions.json"
    rows = [
        {
            "id": "alg-1",
            "title": "Algebra",
            "date": "2025-06-02",
            "start_time": "14:00",
            "duration": 1.5,
            "tutor_name": "Jane Doe",
            "student_name": "Sam Miller",
            "recurring": True,
            "recurring_days": ["Monday"],
        },
        {
            "id": "alg-2",
            "title": "Algebra",
            "date": "2025-06-09",
            "start_time": "14:00",
            "duration": 1.5,
            "recurring": True,
        },
        {
            "id": "chem-1",
            "title": "Chemistry",
            "date": "2025-06-03",
            "start_time": "09:00",
            "duration": 1,
            "class_id": "AR-JD-20250603-1",
        },
    ]
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


def test_day_shows_sessions(records_file):
    result = runner.invoke(cli_main.app, ["day", "2025-06-02", "--records", str(records_file)])

    assert result.exit_code == 0, result.output
    assert "Algebra" in result.output
    assert "2:00 PM - 3:30 PM" in result.output
    assert "Chemistry" not in result.output


def test_day_without_classes(records_file):
    result = runner.invoke(cli_main.app, ["day", "2025-06-04", "--records", str(records_file)])

    assert result.exit_code == 0
    assert "no classes" in result.output


def test_day_rejects_bad_date(records_file):
    result = runner.invoke(cli_main.app, ["day", "someday", "--records", str(records_file)])

    assert result.exit_code == 1
    assert "Invalid date" in result.output


def test_upcoming_uses_today_override(records_file):
    result = runner.invoke(
        cli_main.app,
        ["upcoming", "--days", "3", "--today", "2025-06-01", "--records", str(records_file)],
    )

    assert result.exit_code == 0, result.output
    assert "Algebra" in result.output
    assert "Chemistry" in result.output
    assert result.output.index("2025-06-02") < result.output.index("2025-06-03")
    assert "2025-06-09" not in result.output


def test_month_lists_busy_days(records_file):
    result = runner.invoke(cli_main.app, ["month", "2025", "6", "--records", str(records_file)])

    assert result.exit_code == 0, result.output
    assert "June 2025" in result.output
    assert "Days with classes: 2025-06-02, 2025-06-03, 2025-06-09" in result.output


def test_recurring_delete_updates_file(records_file):
    result = runner.invoke(
        cli_main.app, ["delete", "alg-1", "--recurring", "--records", str(records_file)]
    )

    assert result.exit_code == 0, result.output
    assert "Deleted 2 class(es): alg-1, alg-2" in result.output
    remaining = json.loads(records_file.read_text(encoding="utf-8"))
    assert [row["id"] for row in remaining] == ["chem-1"]


def test_delete_unknown_session_exits_with_error(records_file):
    result = runner.invoke(cli_main.app, ["delete", "ghost", "--records", str(records_file)])

    assert result.exit_code == 1
    assert "ghost" in result.output


def test_validate_file_flags_unreadable_rows(records_file):
    rows = json.loads(records_file.read_text(encoding="utf-8"))
    rows.append({"id": "broken", "title": "Physics", "date": "not-a-date"})
    rows.append({"id": "odd-code", "title": "Art", "date": "2025-06-05", "class_id": "ART-1"})
    records_file.write_text(json.dumps(rows), encoding="utf-8")

    result = runner.invoke(cli_main.app, ["validate-file", "--records", str(records_file)])

    assert result.exit_code == 1
    assert "Checked 5 record(s)." in result.output
    assert "Unreadable record: broken" in result.output
    assert "Malformed class code on record: odd-code" in result.output


def test_validate_file_passes_clean_file(records_file):
    result = runner.invoke(cli_main.app, ["validate-file", "--records", str(records_file)])

    assert result.exit_code == 0, result.output
    assert "All records readable." in result.output


def test_corrupt_file_exits_with_error(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text("{oops", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["upcoming", "--records", str(path)])

    assert result.exit_code == 1
    assert "Could not load class records" in result.output
