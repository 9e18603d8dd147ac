"""
Helper utility functions for dates and day arithmetic
"""
from datetime import date, datetime
from typing import Optional, Union
import pytz

UTC = pytz.utc


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are assumed to be UTC already"""
    if value.tzinfo is None:
        return UTC.localize(value)
    return value.astimezone(UTC)


def noon_utc(day: date) -> datetime:
    """Pin a calendar date to 12:00 UTC so it never rolls over when shown in another timezone"""
    return UTC.localize(datetime(day.year, day.month, day.day, 12, 0, 0))


def calendar_day(value: Union[date, datetime, None]) -> Optional[date]:
    """Collapse a date or datetime to its whole calendar day in the UTC frame"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value).date()
    return value


def days_between(start: date, end: date) -> int:
    """Signed number of whole days from start to end"""
    return (end - start).days


def today_in(tz_name: str = "UTC") -> date:
    """Today's date in the given calendar timezone"""
    return datetime.now(pytz.timezone(tz_name)).date()


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, delta: int) -> date:
    """Shift to the first day of the month `delta` months away"""
    index = day.year * 12 + (day.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def format_api_date(value: Union[date, datetime]) -> str:
    """Format a date as YYYY-MM-DD for upstream query parameters"""
    return value.strftime("%Y-%m-%d")


def serialize_day(value: Optional[datetime]) -> Optional[str]:
    """Serialize a booking datetime as its ISO calendar date"""
    day = calendar_day(value)
    return day.isoformat() if day else None
