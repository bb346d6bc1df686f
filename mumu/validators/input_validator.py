"""Input validation for visit planning requests"""
from datetime import date, timedelta
from typing import List
from ..config import settings
from ..models.visit import DateMode, TimeBudgetMode, Visit


class ValidationError(Exception):
    """Custom validation error"""
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidDateRangeError(ValidationError):
    """End date before start date; callers must fix the input, it is never swapped"""


def validate_dates(start_date: date, end_date: date) -> int:
    """
    Validate a fixed trip date range

    Args:
        start_date: First day of the visit
        end_date: Last day of the visit (inclusive)

    Returns:
        Number of days in the range

    Raises:
        InvalidDateRangeError: If end_date is before start_date
    """
    if end_date < start_date:
        raise InvalidDateRangeError(
            "End date cannot be before start date",
            {"start_date": str(start_date), "end_date": str(end_date)}
        )
    return (end_date - start_date).days + 1


def resolve_visit_dates(visit: Visit, today: date) -> List[date]:
    """
    Resolve the calendar days a visit covers

    Fixed visits use start_date..end_date inclusive. Flexible visits take
    flexible_days consecutive days from start_date, or from today when no
    start date is set.

    Raises:
        ValidationError: If a fixed visit is missing a date
        InvalidDateRangeError: If end_date is before start_date
    """
    if visit.date_mode == DateMode.FIXED:
        if visit.start_date is None or visit.end_date is None:
            raise ValidationError(
                "Fixed visits need both a start and an end date",
                {"start_date": str(visit.start_date), "end_date": str(visit.end_date)}
            )
        count = validate_dates(visit.start_date, visit.end_date)
        start = visit.start_date
    else:
        count = visit.flexible_days or settings.default_flexible_days
        if count > settings.max_flexible_days:
            raise ValidationError(
                f"Flexible trips cannot exceed {settings.max_flexible_days} days",
                {"flexible_days": count, "max_days": settings.max_flexible_days}
            )
        start = visit.start_date or today

    return [start + timedelta(days=offset) for offset in range(count)]


def daily_budget_hours(visit: Visit) -> float:
    """
    Hours available for museums each day

    Raises:
        ValidationError: If a time-window visit has no window, or the window ends before it starts
    """
    if visit.time_budget_mode == TimeBudgetMode.ALL_DAY:
        return settings.all_day_budget_hours

    window = visit.daily_time_window
    if window is None:
        raise ValidationError("Time-window visits need a daily time window")
    if window.duration_hours <= 0:
        raise ValidationError(
            "Daily time window must end after it starts",
            {"start": window.start, "end": window.end}
        )
    return window.duration_hours


def validate_visit(visit: Visit, today: date) -> dict:
    """
    Validate a visit before generating a plan

    Returns:
        dict: Validation metadata (days, daily budget)

    Raises:
        ValidationError: If the visit cannot be planned
    """
    days = resolve_visit_dates(visit, today)
    budget = daily_budget_hours(visit)

    for stop in visit.stops:
        if stop.label is None:
            raise ValidationError(
                "Each stop needs a region, country, state or city",
                {"stop_id": stop.id}
            )

    return {
        "trip_duration_days": len(days),
        "daily_budget_hours": budget
    }
