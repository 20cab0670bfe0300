from datetime import datetime, timedelta, timezone

import pytest

from core.priorities import (
    DEFAULT_PRIORITY,
    Priority,
    normalize_priority,
    parse_priority,
    priority_label,
    priority_options,
)
from utils.datetime_utils import format_display, format_timestamp, parse_timestamp, strip_tz


def test_format_timestamp_and_display():
    dt = datetime(2024, 3, 9, 14, 5, 7)
    assert format_timestamp(dt) == "2024-03-09 14:05:07"
    assert format_timestamp(None) == ""
    assert format_display(dt) == "Mar 09, 2024 14:05"
    assert format_display(None) is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-03-09 14:05:07", datetime(2024, 3, 9, 14, 5, 7)),
        ("2024-03-09T14:05:07", datetime(2024, 3, 9, 14, 5, 7)),
        ("2024-03-09", datetime(2024, 3, 9)),
        ("03/09/2024 14:05:07", datetime(2024, 3, 9, 14, 5, 7)),
        ("03/09/2024 2:05:07 PM", datetime(2024, 3, 9, 14, 5, 7)),
    ],
)
def test_parse_timestamp_forms(text, expected):
    assert parse_timestamp(text) == expected


def test_parse_timestamp_empty_and_invalid():
    assert parse_timestamp(None) is None
    assert parse_timestamp("   ") is None
    with pytest.raises(ValueError):
        parse_timestamp("next tuesday")


def test_zulu_timestamps_become_local_naive():
    parsed = parse_timestamp("2024-03-09T12:00:00Z")
    assert parsed.tzinfo is None
    expected = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parsed == expected


def test_strip_tz():
    naive = datetime(2024, 1, 1)
    assert strip_tz(naive) is naive
    aware = datetime(2024, 1, 1, tzinfo=timezone(timedelta(hours=3)))
    assert strip_tz(aware).tzinfo is None


def test_priority_normalization():
    assert normalize_priority(None) is DEFAULT_PRIORITY
    assert normalize_priority(2) is Priority.HIGH
    assert normalize_priority(" 0 ") is Priority.LOW
    assert normalize_priority("high") is Priority.HIGH
    assert normalize_priority(17) is DEFAULT_PRIORITY
    assert normalize_priority("urgent") is DEFAULT_PRIORITY


def test_parse_priority_is_strict():
    assert parse_priority("1") is Priority.MEDIUM
    assert parse_priority("5") is None
    assert parse_priority("") is None


def test_priority_options_highest_first():
    assert list(priority_options()) == ["2", "1", "0"]
    assert priority_label(Priority.MEDIUM, short=True) == "Med"
