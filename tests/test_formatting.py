"""Tests for elapsed-time and pace formatting."""

from datetime import datetime

import pytest

from lanepace.timer.formatting import format_clock_time, format_elapsed, parse_pace


@pytest.mark.parametrize("seconds, expected", [
    (0, "0:00.00"),
    (1.5, "0:01.50"),
    (83.456, "1:23.45"),
    (59.999, "0:59.99"),
    (3723.5, "1:02:03.50"),
    (-4.0, "0:00.00"),
])
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_format_without_hundredths():
    assert format_elapsed(83.9, show_hundredths=False) == "1:23"
    assert format_elapsed(3600, show_hundredths=False) == "1:00:00"


@pytest.mark.parametrize("text, expected", [
    ("1:05", 65.0),
    ("0:58.5", 58.5),
    (" 2:00 ", 120.0),
    ("65", 0.0),
    ("a:b", 0.0),
    ("1:2:3", 0.0),
])
def test_parse_pace(text, expected):
    assert parse_pace(text) == expected


@pytest.mark.parametrize("hour, minute, second, expected_24, expected_12", [
    (14, 5, 9, "14:05:09", "2:05:09 PM"),
    (0, 30, 0, "00:30:00", "12:30:00 AM"),
    (12, 0, 1, "12:00:01", "12:00:01 PM"),
    (9, 59, 59, "09:59:59", "9:59:59 AM"),
])
def test_format_clock_time(hour, minute, second, expected_24, expected_12):
    when = datetime(2025, 8, 21, hour, minute, second)
    assert format_clock_time(when) == expected_24
    assert format_clock_time(when, use_24_hour=False) == expected_12
