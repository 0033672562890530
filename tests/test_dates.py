"""Tests for calendar helpers."""

from datetime import date

import pytest

from house_help.ledger.dates import (
    add_months,
    days_in_month_from_key,
    end_of_month,
    is_month_key,
    month_days,
    month_key_of,
    parse_month_key,
    to_iso_date,
    weekday_index_mon0,
    yesterday_iso,
)


class TestDaysInMonth:
    """Test day counts per month key."""

    @pytest.mark.parametrize(
        "month_key,expected",
        [
            ("2024-02", 29),
            ("2023-02", 28),
            ("2024-04", 30),
            ("2024-12", 31),
            ("1900-02", 28),
            ("2000-02", 29),
        ],
    )
    def test_actual_calendar_days(self, month_key, expected):
        assert days_in_month_from_key(month_key) == expected

    @pytest.mark.parametrize("month_key", ["", "garbage", "2024-13", "2024-00", "2024-2", "24-02"])
    def test_malformed_key_falls_back_to_30(self, month_key):
        assert days_in_month_from_key(month_key) == 30


class TestKeys:
    """Test day and month key formatting and parsing."""

    def test_zero_padding(self):
        assert to_iso_date(date(2024, 3, 5)) == "2024-03-05"
        assert month_key_of(date(2024, 3, 5)) == "2024-03"

    def test_parse_month_key(self):
        assert parse_month_key("2024-06") == date(2024, 6, 1)
        assert parse_month_key("2024-13") is None
        assert parse_month_key("June") is None

    def test_is_month_key(self):
        assert is_month_key("2024-06") is True
        assert is_month_key("2024-06-01") is False
        assert is_month_key(None) is False

    def test_trailing_newline_is_not_a_month_key(self):
        assert is_month_key("2024-06\n") is False
        assert parse_month_key("2024-06\n") is None


class TestMonthArithmetic:
    """Test month navigation helpers."""

    def test_add_months_crosses_years(self):
        assert add_months(date(2024, 1, 31), -1) == date(2023, 12, 1)
        assert add_months(date(2024, 12, 10), 1) == date(2025, 1, 1)
        assert add_months(date(2024, 1, 1), 13) == date(2025, 2, 1)

    def test_end_of_month(self):
        assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)

    def test_month_days(self):
        days = month_days("2024-02")
        assert len(days) == 29
        assert days[0] == date(2024, 2, 1)
        assert days[-1] == date(2024, 2, 29)
        assert month_days(date(2024, 4, 20))[-1] == date(2024, 4, 30)
        assert month_days("bad") == []

    def test_yesterday_crosses_month(self):
        assert yesterday_iso(date(2024, 3, 1)) == "2024-02-29"

    def test_weekday_monday_first(self):
        assert weekday_index_mon0(date(2024, 6, 3)) == 0  # Monday
        assert weekday_index_mon0(date(2024, 6, 9)) == 6  # Sunday
