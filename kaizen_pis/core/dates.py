"""
Flexible Dates

Calendar-tagged day values. Dates carry the name of the calendar
system they were built under; comparing dates across calendars is
an error rather than a silent conversion.
"""

from dataclasses import dataclass
from typing import Optional

from .exceptions import IncompatibleCalendar


@dataclass(frozen=True)
class FlexibleDate:
    """A year/month/day triple on a named calendar."""
    year: int
    month: int
    day: int
    calendar: str = "gregorian"

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}-{self.day:02d} ({self.calendar})"

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "calendar": self.calendar
        }


def create_flexible_date(
    year: int,
    month: int,
    day: int,
    calendar: Optional[str] = None
) -> FlexibleDate:
    """
    Create a FlexibleDate.

    When no calendar is given the configured default calendar is used.
    """
    if calendar is None:
        from ..config.settings import get_settings
        calendar = get_settings().default_calendar
    return FlexibleDate(year=year, month=month, day=day, calendar=calendar)


def compare_flexible_dates(first: FlexibleDate, second: FlexibleDate) -> int:
    """
    Compare two dates.

    Returns a negative number if `first` is earlier, positive if later
    and zero if both fall on the same day.

    Raises:
        IncompatibleCalendar: the dates use different calendar systems.
    """
    if first.calendar != second.calendar:
        raise IncompatibleCalendar(first.calendar, second.calendar)

    if first.year != second.year:
        return first.year - second.year
    if first.month != second.month:
        return first.month - second.month
    return first.day - second.day
