"""Resolution of free-text time descriptions against the screenshot capture time."""

from collections.abc import Callable
from datetime import date, datetime, timedelta

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Days scanned backwards, inclusive of the reference day itself
WEEKDAY_WINDOW_DAYS = 7

DateHandler = Callable[[str, datetime], datetime | None]


def _from_yesterday(description: str, reference: datetime) -> datetime | None:
    if description == "Yesterday":
        return reference - timedelta(days=1)
    return None


def _from_weekday(description: str, reference: datetime) -> datetime | None:
    """Find the most recent date (today first) whose weekday name matches."""
    for offset in range(WEEKDAY_WINDOW_DAYS + 1):
        candidate = reference - timedelta(days=offset)
        if WEEKDAY_NAMES[candidate.weekday()] == description:
            return candidate
    return None


def _from_formatted(description: str, reference: datetime) -> datetime | None:
    try:
        return datetime.strptime(description, "%m/%d/%y")
    except ValueError:
        return None


def _leading_value(description: str, unit: str) -> int | None:
    if unit not in description:
        return None
    tokens = description.split(" ")
    try:
        return int(tokens[0])
    except ValueError:
        return None


def _from_hours_ago(description: str, reference: datetime) -> datetime | None:
    hours = _leading_value(description, "hour")
    if hours is None:
        return None
    return reference - timedelta(hours=hours)


def _from_minutes_ago(description: str, reference: datetime) -> datetime | None:
    minutes = _leading_value(description, "minute")
    if minutes is None:
        return None
    return reference - timedelta(minutes=minutes)


# Tried in order; the first handler returning a value wins
DATE_HANDLERS: list[tuple[str, DateHandler]] = [
    ("yesterday", _from_yesterday),
    ("weekday", _from_weekday),
    ("mm/dd/yy", _from_formatted),
    ("hours ago", _from_hours_ago),
    ("minutes ago", _from_minutes_ago),
]


def as_datetime(value: date | datetime) -> datetime:
    """Promote a calendar date to midnight so relative offsets can be applied."""
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def match_time_description(
    description: str,
    screenshot_date: date | datetime,
) -> tuple[str, datetime] | None:
    """Resolve a time description without falling back.

    Args:
        description: Time text such as "Yesterday", "Tuesday", "01/19/21" or "3 hours ago"
        screenshot_date: When the screenshot was captured

    Returns:
        Tuple of (handler name, resolved datetime), or None if nothing matched
    """
    reference = as_datetime(screenshot_date)
    for name, handler in DATE_HANDLERS:
        resolved = handler(description, reference)
        if resolved is not None:
            return name, resolved
    return None


def resolve_date(description: str, screenshot_date: date | datetime) -> datetime:
    """Resolve a time description, treating anything unrecognised as "just now"."""
    match = match_time_description(description, screenshot_date)
    if match is None:
        return as_datetime(screenshot_date)
    return match[1]
