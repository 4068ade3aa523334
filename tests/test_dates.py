from datetime import date, datetime

import pytest

from registration_reports.utils.dates import (
    day_key,
    event_days,
    format_timestamp,
    parse_date,
    to_local_date,
)


class TestToLocalDate:
    def test_plain_date_passes_through(self):
        assert to_local_date(date(2025, 1, 10)) == date(2025, 1, 10)

    def test_naive_timestamp_is_wall_clock(self):
        assert to_local_date("2025-01-10T23:30:00", "Africa/Lagos") == date(2025, 1, 10)

    def test_aware_timestamp_converted_to_event_zone(self):
        # 23:30 UTC is 00:30 the next day in Lagos (UTC+1)
        assert to_local_date("2025-01-10T23:30:00+00:00", "Africa/Lagos") == date(2025, 1, 11)

    def test_day_key_format(self):
        assert day_key(datetime(2025, 3, 5, 8, 0)) == "2025-03-05"

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            to_local_date("not a date")


class TestParseDate:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan"), "31/31/2025"])
    def test_missing_or_malformed_is_none(self, value):
        assert parse_date(value) is None

    def test_iso_string(self):
        assert parse_date("2025-01-12") == date(2025, 1, 12)


class TestHelpers:
    def test_event_days_inclusive(self):
        days = event_days(date(2025, 1, 10), date(2025, 1, 12))
        assert days == [date(2025, 1, 10), date(2025, 1, 11), date(2025, 1, 12)]

    def test_event_days_reversed_is_empty(self):
        assert event_days(date(2025, 1, 12), date(2025, 1, 10)) == []

    def test_format_timestamp(self):
        assert format_timestamp("2025-01-10T09:05:00+00:00", "Africa/Lagos") == "2025-01-10 10:05:00"
        assert format_timestamp(None) == ""
