"""Tests for date pattern parsing/formatting and day keys."""

from datetime import date, datetime

import pytest

from days.core.dates import (
    date_to_day_number,
    day_key,
    day_number_to_date,
    fill_window,
    format_date,
    from_day_key,
    has_day_key,
    month_window,
    ordinal,
    parse_date,
    start_of_week,
    strip_link_brackets,
    week_number,
)


class TestParseDate:
    @pytest.mark.parametrize(
        "raw,fmt,expected",
        [
            ("2024-03-15", "yyyy-MM-dd", date(2024, 3, 15)),
            ("[[2024-03-15]]", "yyyy-MM-dd", date(2024, 3, 15)),
            ("Mar 15th, 2024", "MMM do, yyyy", date(2024, 3, 15)),
            ("mar 1st, 2024", "MMM do, yyyy", date(2024, 3, 1)),
            ("March 5, 2024", "MMMM d, yyyy", date(2024, 3, 5)),
            ("Friday, 15.03.2024", "EEEE, dd.MM.yyyy", date(2024, 3, 15)),
            ("Fri, 2024/03/15", "EEE, yyyy/MM/dd", date(2024, 3, 15)),
            ("20240315", "yyyyMMdd", date(2024, 3, 15)),
            ("15 Mar 2024", "dd MMM yyyy", date(2024, 3, 15)),
        ],
    )
    def test_valid(self, raw, fmt, expected):
        assert parse_date(raw, fmt) == expected

    @pytest.mark.parametrize(
        "raw,fmt",
        [
            ("not-a-date", "yyyy-MM-dd"),
            ("2024-01-32", "yyyy-MM-dd"),
            ("2023-02-29", "yyyy-MM-dd"),
            ("2024-13-01", "yyyy-MM-dd"),
            ("2024-03-15 and more", "yyyy-MM-dd"),
            ("", "yyyy-MM-dd"),
            ("2024-03-15", ""),
        ],
    )
    def test_invalid_returns_none(self, raw, fmt):
        assert parse_date(raw, fmt) is None

    def test_pattern_without_day_cannot_parse(self):
        assert parse_date("2024-W11", "yyyy-'W'w") is None

    def test_leap_day(self):
        assert parse_date("2024-02-29", "yyyy-MM-dd") == date(2024, 2, 29)

    def test_day_without_timestamp(self):
        assert parse_date("0001-01-01", "yyyy-MM-dd") is None
        assert not has_day_key(date(1, 1, 1))
        assert has_day_key(date(2024, 3, 15))


class TestFormatDate:
    def test_default_journal_format(self):
        assert format_date(date(2024, 3, 15), "MMM do, yyyy") == "Mar 15th, 2024"

    def test_names_and_padding(self):
        d = date(2024, 3, 5)
        assert format_date(d, "EEEE, MMMM d") == "Tuesday, March 5"
        assert format_date(d, "EEE dd.MM.yy") == "Tue 05.03.24"

    def test_quoted_literal(self):
        assert format_date(date(2024, 3, 15), "yyyy-'W'w") == "2024-W11"

    def test_escaped_quote(self):
        assert format_date(date(2024, 3, 15), "d MMM ''yy") == "15 Mar '24"

    def test_iso_week_year(self):
        # 2021-01-01 belongs to the last ISO week of 2020
        assert format_date(date(2021, 1, 1), "YYYY-'W'ww", week_start=1, first_week_contains_date=4) == "2020-W53"

    def test_unsupported_token(self):
        with pytest.raises(ValueError):
            format_date(date(2024, 3, 15), "yyyy Q")


class TestWeeks:
    def test_start_of_week_sunday(self):
        assert start_of_week(date(2024, 3, 15)) == date(2024, 3, 10)

    def test_start_of_week_monday(self):
        assert start_of_week(date(2024, 3, 15), week_start=1) == date(2024, 3, 11)
        assert start_of_week(date(2024, 3, 11), week_start=1) == date(2024, 3, 11)

    def test_week_number_sunday_start(self):
        assert week_number(date(2024, 3, 15)) == 11
        assert week_number(date(2024, 1, 1)) == 1

    def test_week_number_iso(self):
        assert week_number(date(2024, 3, 15), week_start=1, first_week_contains_date=4) == 11
        assert week_number(date(2021, 1, 1), week_start=1, first_week_contains_date=4) == 53

    def test_last_days_of_year_roll_into_week_one(self):
        # Sunday-start weeks: Dec 31 2024 shares a week with Jan 1 2025
        assert week_number(date(2024, 12, 31)) == 1


class TestHelpers:
    @pytest.mark.parametrize(
        "n,expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"),
         (13, "13th"), (21, "21st"), (22, "22nd"), (103, "103rd")],
    )
    def test_ordinal(self, n, expected):
        assert ordinal(n) == expected

    def test_strip_link_brackets(self):
        assert strip_link_brackets("[[Mar 15th, 2024]]") == "Mar 15th, 2024"
        assert strip_link_brackets("plain") == "plain"

    def test_day_key_is_local_midnight(self):
        d = date(2024, 3, 15)
        assert day_key(d) == int(datetime(2024, 3, 15).timestamp() * 1000)
        assert from_day_key(day_key(d)) == d

    def test_day_numbers(self):
        assert day_number_to_date(20240315) == date(2024, 3, 15)
        assert date_to_day_number(date(2024, 3, 15)) == 20240315

    def test_invalid_day_number(self):
        with pytest.raises(ValueError):
            day_number_to_date(20240230)

    def test_month_window(self):
        assert month_window(2024, 3) == (date(2024, 3, 1), date(2024, 4, 1))
        assert month_window(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))

    def test_fill_window_pads_six_days(self):
        assert fill_window(2024, 3) == (date(2024, 2, 24), date(2024, 4, 6))
