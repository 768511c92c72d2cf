"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_iso_date(date_str: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` date.

    Raises:
        ValueError: If the string is not an ISO date or not a real calendar day
    """
    if not isinstance(date_str, str) or _ISO_DATE.fullmatch(date_str) is None:
        raise ValueError(f"Could not parse date '{date_str}': expected YYYY-MM-DD")
    try:
        return date.fromisoformat(date_str)
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def is_in_future(day: date, today: Optional[date] = None) -> bool:
    """Return True when ``day`` lies after today (today itself is not future)."""
    return day > (today or date.today())


def parse_collection_date(date_str: str) -> date:
    """Parse a collection date given on the command line.

    Supports ISO dates and relative dates:
    - Absolute dates: "2025-12-03"
    - Relative dates: "tomorrow", "in 5 days", "next week", "next month",
      "next friday"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    if date_str == "tomorrow":
        return today + timedelta(days=1)

    if date_str.startswith("in ") and date_str.endswith((" day", " days")):
        count = date_str.split()[1]
        if count.isdigit():
            return today + timedelta(days=int(count))

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "week":
            # Monday of next week
            return today + timedelta(days=(7 - today.weekday()))
        elif period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period in _WEEKDAYS:
            days_ahead = (_WEEKDAYS.index(period) - today.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            return today + timedelta(days=days_ahead)

    return parse_iso_date(date_str)


def local_now() -> datetime:
    """Current local time with UTC offset, without microseconds."""
    return datetime.now(tz.tzlocal()).replace(microsecond=0)


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp as ISO 8601 with offset, e.g. 2017-07-26T09:09:30+02:00."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz.tzlocal())
    return moment.replace(microsecond=0).isoformat()


def compact_timestamp(moment: Optional[datetime] = None) -> str:
    """Timestamp used to synthesize identifiers, e.g. 20250101120000."""
    return (moment or datetime.now()).strftime("%Y%m%d%H%M%S")
