"""
Business Calendar

Weekday arithmetic on calendar dates. Saturdays and Sundays are never
business days; holidays are not modeled.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo

SATURDAY = 5


def is_business_day(day: date) -> bool:
    return day.weekday() < SATURDAY


def business_days_between(start: date, end: date) -> int:
    """
    Count business days in the half-open interval (start, end].

    Returns 0 when end <= start. Monday 2024-01-01 to Monday 2024-01-08
    yields 5. For any day d and n >= 0,
    business_days_between(d, add_business_days(d, n)) == n.
    """
    if end <= start:
        return 0

    full_weeks, remainder = divmod((end - start).days, 7)
    count = full_weeks * 5
    for offset in range(1, remainder + 1):
        if is_business_day(start + timedelta(days=offset)):
            count += 1
    return count


def add_business_days(day: date, days: int) -> date:
    """
    Advance a date by a number of business days.

    days == 0 returns the date unchanged. For days > 0 the result is never a
    weekend.

    Raises:
        ValueError: days is negative
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")
    if days == 0:
        return day

    # Counting from a weekend is the same as counting from the Friday before
    result = day
    while not is_business_day(result):
        result -= timedelta(days=1)

    full_weeks, remainder = divmod(days, 5)
    result += timedelta(weeks=full_weeks)
    while remainder > 0:
        result += timedelta(days=1)
        if is_business_day(result):
            remainder -= 1
    return result


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_timezone(name: str) -> tzinfo:
    """Map a configured time zone name to a tzinfo (UTC for empty names)"""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def to_business_date(value: Union[datetime, date], tz: tzinfo = timezone.utc) -> date:
    """
    Calendar date of a timestamp in the business time zone.

    Naive datetimes are taken as UTC. Plain dates pass through.
    """
    if isinstance(value, datetime):
        return ensure_aware(value).astimezone(tz).date()
    return value
