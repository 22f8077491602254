"""Tests for day keys and week windows.

The root conftest pins the board timezone to America/Los_Angeles.
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from harvest_board.config.settings import settings
from harvest_board.dates import (
    coerce_datetime,
    day_boundary,
    day_boundary_iso,
    day_keys_for_week,
    format_range_label,
    is_day_key,
    parse_day_key,
    start_of_week,
    to_day_key,
    week_day_keys,
    weekday_short,
)
from harvest_board.errors import InvalidDayKeyError


class TestCoerceDatetime:
    def test_date_becomes_local_midnight(self):
        assert coerce_datetime(date(2024, 6, 10)) == datetime(2024, 6, 10, 0, 0)

    def test_date_only_string(self):
        assert coerce_datetime("2024-06-10") == datetime(2024, 6, 10)

    def test_zulu_suffix_is_utc(self):
        assert coerce_datetime("2024-06-11T07:00:00.000Z") == datetime(2024, 6, 11, 7, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "yesterday", 12345])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            coerce_datetime(value)


class TestToDayKey:
    def test_plain_values(self):
        assert to_day_key(date(2024, 6, 10)) == "2024-06-10"
        assert to_day_key(datetime(2024, 6, 10, 23, 59)) == "2024-06-10"
        assert to_day_key("2024-06-10") == "2024-06-10"

    def test_aware_values_are_truncated_in_local_time(self):
        # 03:00 UTC on the 11th is the evening of the 10th in Los Angeles
        assert to_day_key("2024-06-11T03:00:00Z") == "2024-06-10"
        assert to_day_key(datetime(2024, 6, 11, 12, tzinfo=timezone.utc)) == "2024-06-11"

    def test_other_board_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "timezone", "Asia/Tokyo")
        assert to_day_key("2024-06-10T20:00:00Z") == "2024-06-11"


class TestParseDayKey:
    def test_valid(self):
        assert parse_day_key("2024-02-29") == date(2024, 2, 29)
        assert is_day_key("2024-06-10")

    @pytest.mark.parametrize("value", ["2024-6-1", "2023-02-29", "20240610", None, 20240610])
    def test_invalid(self, value):
        with pytest.raises(InvalidDayKeyError):
            parse_day_key(value)
        assert not is_day_key(value)

    def test_invalid_day_key_is_value_error(self):
        with pytest.raises(ValueError):
            parse_day_key("nope")


class TestDayBoundary:
    def test_boundary_is_local_midnight(self):
        boundary = day_boundary("2024-06-11")
        assert boundary.tzinfo is not None
        assert (boundary.hour, boundary.minute) == (0, 0)
        assert to_day_key(boundary) == "2024-06-11"

    def test_iso_is_utc_instant(self):
        assert day_boundary_iso("2024-06-11") == "2024-06-11T07:00:00.000Z"
        assert day_boundary_iso("2024-01-15") == "2024-01-15T08:00:00.000Z"

    def test_iso_round_trips_to_same_day(self):
        assert to_day_key(day_boundary_iso("2024-11-03")) == "2024-11-03"


class TestWeekWindow:
    def test_start_of_week_sunday_default(self):
        assert settings.week_starts_on == 6
        assert start_of_week(date(2024, 6, 12)) == date(2024, 6, 9)
        assert start_of_week(date(2024, 6, 9)) == date(2024, 6, 9)

    def test_start_of_week_monday(self):
        assert start_of_week(date(2024, 6, 12), week_starts_on=0) == date(2024, 6, 10)
        assert start_of_week(date(2024, 6, 16), week_starts_on=0) == date(2024, 6, 10)

    def test_week_day_keys(self):
        keys = week_day_keys(date(2024, 6, 10))
        assert keys[0] == "2024-06-10"
        assert keys[-1] == "2024-06-16"
        assert len(keys) == 7

    def test_week_crosses_month_boundary(self):
        keys = day_keys_for_week("2024-07-02", week_starts_on=0)
        assert keys == [(date(2024, 7, 1) + timedelta(days=i)).isoformat() for i in range(7)]

    def test_labels(self):
        assert weekday_short(date(2024, 6, 9)) == "Sun"
        assert weekday_short(date(2024, 6, 10)) == "Mon"
        assert format_range_label(date(2024, 6, 9), date(2024, 6, 15)) == "6/9 – 6/15"
