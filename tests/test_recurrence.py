"""Tests for repeat rules and recurrence expansion."""

import math
from datetime import date

import pytest

from days.core.properties import FAR_FUTURE
from days.core.recurrence import RepeatRule, expand, parse_repeater, parse_rule

MAY = (date(2024, 5, 1), date(2024, 6, 1))


class TestParseRule:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1d", RepeatRule(1, "d")),
            ("2w", RepeatRule(2, "w")),
            ("3m", RepeatRule(3, "m")),
            ("10y", RepeatRule(10, "y")),
            (" 1w ", RepeatRule(1, "w")),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_rule(text) == expected

    @pytest.mark.parametrize("text", ["3x", "w", "0d", "-1d", "1.5w", "", None, "2h"])
    def test_malformed(self, text):
        assert parse_rule(text) is None

    def test_str_round_trip(self):
        assert str(RepeatRule(2, "w")) == "2w"


class TestExpand:
    def test_malformed_rule_yields_nothing(self):
        assert expand(date(2024, 1, 1), "3x", math.inf, FAR_FUTURE, *MAY) == []

    def test_yearly_anchor_years_back(self):
        result = expand(date(2020, 1, 1), "1y", math.inf, FAR_FUTURE, date(2024, 3, 1), date(2024, 4, 1))
        assert result == [date(2024, 1, 1)]

    def test_weekly_within_window(self):
        result = expand(date(2024, 5, 10), "1w", math.inf, FAR_FUTURE, *MAY)
        assert result == [date(2024, 5, 17), date(2024, 5, 24), date(2024, 5, 31)]

    def test_daily_from_before_window(self):
        result = expand(date(2024, 4, 20), "1d", math.inf, FAR_FUTURE, *MAY)
        assert result[0] == date(2024, 5, 1)
        assert result[-1] == date(2024, 5, 31)
        assert len(result) == 31

    def test_max_occurrences(self):
        result = expand(date(2024, 5, 1), "1w", 2, FAR_FUTURE, *MAY)
        assert result == [date(2024, 5, 8), date(2024, 5, 15)]

    def test_negative_max_means_endless(self):
        result = expand(date(2024, 5, 1), "1w", -1, FAR_FUTURE, *MAY)
        assert len(result) == 4

    def test_zero_occurrences(self):
        assert expand(date(2024, 1, 1), "1m", 0, FAR_FUTURE, *MAY) == []

    def test_count_reached_before_window(self):
        # Only one repetition allowed; it falls in February.
        assert expand(date(2024, 1, 1), "1m", 1, FAR_FUTURE, *MAY) == [date(2024, 2, 1)]

    def test_end_date_is_exclusive(self):
        result = expand(date(2024, 5, 1), "1w", math.inf, date(2024, 5, 15), *MAY)
        assert result == [date(2024, 5, 8)]

    def test_fast_forward_may_land_on_end_date(self):
        # end_date before the window: the jumped-to occurrence is still emitted
        result = expand(date(2023, 1, 31), "1d", math.inf, date(2024, 3, 1), date(2024, 4, 1), date(2024, 5, 1))
        assert result == [date(2024, 3, 1)]

    def test_month_end_does_not_drift(self):
        result = expand(date(2024, 1, 31), "1m", math.inf, FAR_FUTURE, date(2024, 4, 1), date(2024, 5, 1))
        assert result == [date(2024, 3, 31), date(2024, 4, 30)]

    def test_multi_unit_quantity(self):
        result = expand(date(2024, 1, 1), "2w", math.inf, FAR_FUTURE, *MAY)
        assert result == [date(2024, 4, 22), date(2024, 5, 6), date(2024, 5, 20)]

    def test_accepts_rule_object(self):
        by_text = expand(date(2024, 5, 1), "1d", 3, FAR_FUTURE, *MAY)
        by_rule = expand(date(2024, 5, 1), RepeatRule(1, "d"), 3, FAR_FUTURE, *MAY)
        assert by_text == by_rule == [date(2024, 5, 2), date(2024, 5, 3), date(2024, 5, 4)]

    @pytest.mark.parametrize("rule", ["1d", "3d", "1w", "2w", "1m", "3m", "1y"])
    @pytest.mark.parametrize("anchor", [date(2019, 2, 28), date(2023, 12, 31), date(2024, 5, 15)])
    def test_strictly_increasing_and_bounded(self, rule, anchor):
        result = expand(anchor, rule, math.inf, FAR_FUTURE, *MAY)
        assert result == sorted(set(result))
        assert all(d < MAY[1] for d in result)
        in_window = [d for d in result if MAY[0] <= d < MAY[1]]
        assert result[len(result) - len(in_window):] == in_window


class TestParseRepeater:
    def test_scheduled_repeater(self):
        assert parse_repeater("TODO water\nSCHEDULED: <2024-03-15 Fri .+1w>") == "1w"

    def test_deadline_with_time(self):
        assert parse_repeater("Pay\nDEADLINE: <2024-03-15 Fri 10:00 ++2d>") == "2d"

    def test_plain_plus(self):
        assert parse_repeater("SCHEDULED: <2024-03-15 Fri +3m>") == "3m"

    def test_no_repeater(self):
        assert parse_repeater("SCHEDULED: <2024-03-15 Fri>") is None
        assert parse_repeater("") is None
