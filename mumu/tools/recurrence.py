"""Recurring monthly date windows (first full weekend, first Saturday, first Sunday)"""
from datetime import date, timedelta
from typing import List, Tuple

from ..schemas.ticket_rules import WeekRule

SATURDAY = 5  # date.weekday()
SUNDAY = 6


def first_weekday_of_month(year: int, month: int, weekday: int) -> date:
    """
    First date in a month falling on a Python weekday (Monday = 0)

    Args:
        year: Calendar year
        month: Month 1-12
        weekday: date.weekday() value to look for

    Returns:
        The first matching date, always within days 1-7
    """
    first = date(year, month, 1)
    return first + timedelta(days=(weekday - first.weekday()) % 7)


def first_full_weekend(year: int, month: int) -> Tuple[date, date]:
    """
    First Saturday/Sunday pair that lies entirely inside the month

    A month starting on Sunday skips that lone Sunday, so its first full
    weekend is the 7th and 8th.
    """
    saturday = first_weekday_of_month(year, month, SATURDAY)
    return saturday, saturday + timedelta(days=1)


def week_rule_dates(rule: WeekRule, year: int, month: int) -> List[date]:
    """All dates of a month covered by a week rule"""
    if rule == WeekRule.FIRST_FULL_WEEKEND:
        return list(first_full_weekend(year, month))
    if rule == WeekRule.FIRST_SATURDAY:
        return [first_weekday_of_month(year, month, SATURDAY)]
    return [first_weekday_of_month(year, month, SUNDAY)]


def matches_week_rule(rule: WeekRule, day: date) -> bool:
    return day in week_rule_dates(rule, day.year, day.month)

