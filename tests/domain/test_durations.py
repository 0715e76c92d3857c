from datetime import time
from decimal import Decimal

import pytest

from tutorhub.domain.durations import (
    calculate_end_time,
    duration_between,
    format_time_12h,
    parse_duration,
    parse_numeric,
    parse_start_time,
)


@pytest.mark.parametrize(
    "start, hours, expected",
    [
        ("14:00", 1.5, "15:30"),
        ("09:45", 0.5, "10:15"),
        ("22:45", 1.5, "00:15"),
        ("23:30", 1, "00:30"),
        ("08:10", 1.25, "09:25"),
        ("9:05", "2", "11:05"),
        ("10:00", "0.75 hrs", "10:45"),
        ("10:50", 0.1666, "11:00"),
    ],
)
def test_calculate_end_time(start, hours, expected):
    assert calculate_end_time(start, hours) == expected


@pytest.mark.parametrize(
    "start, hours",
    [
        ("", 1.5),
        (None, 1.5),
        ("14:00", 0),
        ("14:00", -1),
        ("14:00", None),
        ("14:00", "abc"),
        ("25:00", 1),
        ("2pm", 1),
    ],
)
def test_calculate_end_time_returns_empty_for_unusable_input(start, hours):
    assert calculate_end_time(start, hours) == ""


def test_malformed_start_is_logged(caplog):
    with caplog.at_level("WARNING", logger="tutorhub.domain"):
        assert calculate_end_time("noon", 1) == ""
    assert "noon" in caplog.text


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1.5, 1.5),
        ("1.5", 1.5),
        ("1.5 hrs", 1.5),
        (" 2", 2.0),
        (".5", 0.5),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ([1], 0.0),
        (10**400, 0.0),
        (Decimal("sNaN"), 0.0),
        (Decimal("1.25"), 1.25),
    ],
)
def test_parse_numeric_never_raises(raw, expected):
    assert parse_numeric(raw) == expected


def test_parse_duration_matches_numeric_parser():
    assert parse_duration("1 hour") == 1.0
    assert parse_duration(None) == 0.0


def test_duration_between():
    assert duration_between("14:00", "15:30") == 1.5
    assert duration_between("09:00", "09:20") == pytest.approx(0.3333, abs=1e-4)
    assert duration_between("15:00", "14:00") == 0.0
    assert duration_between("", "14:00") == 0.0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("18:00", "18:00"),
        ("6:00", "06:00"),
        ("18:00:00", "18:00"),
        ("6:30 PM", "18:30"),
        ("6:30pm", "18:30"),
        ("12:15 AM", "00:15"),
        ("6pm", "18:00"),
        ("6 PM", "18:00"),
        ("6-7pm", "18:00"),
        ("12pm", "12:00"),
        (time(7, 5), "07:05"),
        ("", ""),
        ("whenever", ""),
        (None, ""),
    ],
)
def test_parse_start_time(raw, expected):
    assert parse_start_time(raw) == expected


def test_format_time_12h():
    assert format_time_12h("14:05") == "2:05 PM"
    assert format_time_12h("00:30") == "12:30 AM"
    assert format_time_12h("12:00") == "12:00 PM"
    assert format_time_12h("") == ""
    assert format_time_12h("later") == "later"
