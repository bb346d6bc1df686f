"""Tests for recurring monthly date windows"""
from datetime import date

from mumu.schemas.ticket_rules import WeekRule
from mumu.tools.recurrence import (
    first_full_weekend,
    first_weekday_of_month,
    matches_week_rule,
    week_rule_dates,
)


def test_first_full_weekend_skips_a_lone_sunday():
    # March 2026 starts on a Sunday
    assert first_full_weekend(2026, 3) == (date(2026, 3, 7), date(2026, 3, 8))


def test_first_full_weekend_starting_on_saturday():
    # August 2026 starts on a Saturday
    assert first_full_weekend(2026, 8) == (date(2026, 8, 1), date(2026, 8, 2))


def test_first_full_weekend_is_always_saturday_then_sunday():
    for month in range(1, 13):
        saturday, sunday = first_full_weekend(2027, month)
        assert saturday.weekday() == 5
        assert sunday.weekday() == 6
        assert saturday.month == sunday.month == month
        assert saturday.day <= 7


def test_first_weekday_of_month():
    # first Monday of March 2026
    assert first_weekday_of_month(2026, 3, 0) == date(2026, 3, 2)
    assert first_weekday_of_month(2026, 3, 6) == date(2026, 3, 1)


def test_week_rule_dates():
    assert week_rule_dates(WeekRule.FIRST_SATURDAY, 2026, 3) == [date(2026, 3, 7)]
    assert week_rule_dates(WeekRule.FIRST_SUNDAY, 2026, 3) == [date(2026, 3, 1)]


def test_matches_week_rule():
    assert matches_week_rule(WeekRule.FIRST_FULL_WEEKEND, date(2026, 3, 8))
    assert not matches_week_rule(WeekRule.FIRST_FULL_WEEKEND, date(2026, 3, 1))
    assert not matches_week_rule(WeekRule.FIRST_FULL_WEEKEND, date(2026, 3, 14))

