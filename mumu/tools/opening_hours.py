"""Opening-hours parsing tool - answers "is this museum open on day X" from schedule text"""
import re
from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field

from ..schemas.itinerary import OpenStatus


class OpeningHoursEntry(BaseModel):
    """One parsed `<days> <hours>` entry"""
    days: List[int] = Field(..., description="Days of week, 0 = Sunday ... 6 = Saturday")
    hours: str = Field("", description="Time range text, kept for display only")


class OpeningHoursParser:
    """
    Parse schedule text such as

        "Mon 11-5; Wed 11-5; Thu 11-8; Fri-Sun 11-5"
        "Tue-Fri 10-6:30; Sat 10-9; Sun 10-6:30"

    Day ranges may wrap the week ("Sat-Tue" is Sat, Sun, Mon, Tue).
    Entries that cannot be read are skipped.
    """

    DAY_MAP = {
        'sun': 0,
        'mon': 1,
        'tue': 2,
        'wed': 3,
        'thu': 4,
        'fri': 5,
        'sat': 6,
    }

    ENTRY_PATTERN = re.compile(r'^([A-Za-z-]+)\s+(\d.*)$')
    RANGE_PATTERN = re.compile(r'^([a-z]{3})-([a-z]{3})$')

    @classmethod
    def expand_day_range(cls, token: str) -> List[int]:
        """
        Expand a day token into day-of-week numbers

        Examples:
            "Mon" -> [1]
            "Mon-Fri" -> [1, 2, 3, 4, 5]
            "Fri-Sun" -> [5, 6, 0]
        """
        normalized = token.strip().lower()

        range_match = cls.RANGE_PATTERN.match(normalized)
        if range_match:
            start = cls.DAY_MAP.get(range_match.group(1))
            end = cls.DAY_MAP.get(range_match.group(2))
            if start is None or end is None:
                return []
            span = (end - start) % 7
            return [(start + offset) % 7 for offset in range(span + 1)]

        single = cls.DAY_MAP.get(normalized)
        return [single] if single is not None else []

    @classmethod
    def parse(cls, hours_text: Optional[str]) -> List[OpeningHoursEntry]:
        """Parse every readable entry of the schedule"""
        if not hours_text:
            return []

        entries = []
        for raw in hours_text.split(';'):
            match = cls.ENTRY_PATTERN.match(raw.strip())
            if not match:
                continue
            days = cls.expand_day_range(match.group(1))
            if days:
                entries.append(OpeningHoursEntry(days=days, hours=match.group(2).strip()))
        return entries


def day_of_week(day: date) -> int:
    """Sunday-based day number (0 = Sunday) for a date"""
    return (day.weekday() + 1) % 7


def parse_opening_hours(hours_text: Optional[str]) -> List[OpeningHoursEntry]:
    return OpeningHoursParser.parse(hours_text)


def is_open_on_day(hours_text: Optional[str], weekday: int) -> bool:
    """
    Returns True if any entry covers the day (0 = Sunday, 6 = Saturday)

    False means "not found open"; callers tell unknown apart by checking
    whether hours_text is empty.
    """
    return any(weekday in entry.days for entry in OpeningHoursParser.parse(hours_text))


def is_open_today(hours_text: Optional[str], today: Optional[date] = None) -> bool:
    """Returns True if the schedule covers today's weekday"""
    return is_open_on_day(hours_text, day_of_week(today or date.today()))


def open_status(hours_text: Optional[str], day: date) -> OpenStatus:
    """
    Open status of a schedule on a calendar day

    Missing or entirely unreadable hours are "unknown", never "closed".
    """
    if not hours_text or not hours_text.strip():
        return OpenStatus(status="unknown", note="Hours not available", needs_confirmation=True)
    if "temporarily closed" in hours_text.lower():
        return OpenStatus(status="closed", note="Temporarily closed")

    entries = OpeningHoursParser.parse(hours_text)
    if not entries:
        return OpenStatus(status="unknown", note="Hours could not be read", needs_confirmation=True)

    weekday = day_of_week(day)
    if any(weekday in entry.days for entry in entries):
        return OpenStatus(status="open")
    return OpenStatus(status="closed", note="Closed this day")
