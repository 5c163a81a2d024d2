"""
Report Schedule Utility

Computes weekday run slots in the configured report timezone.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional
import pytz


def parse_run_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    hour_str, minute_str = value.strip().split(":")
    hour, minute = int(hour_str), int(minute_str)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid run time: {value}")
    return hour, minute


def get_local_now(timezone: str) -> datetime:
    """Get current time in the given timezone."""
    return datetime.now(pytz.timezone(timezone))


def is_report_day(dt: datetime, weekdays: Iterable[int]) -> bool:
    """Check if the date falls on a configured report weekday (Monday=0)."""
    return dt.weekday() in set(weekdays)


def next_run_time(
    run_time: str,
    weekdays: Iterable[int],
    timezone: str,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Get the next report slot strictly after `now`.

    Returns a timezone-aware datetime in the report timezone.
    """
    tz = pytz.timezone(timezone)
    days = set(weekdays)
    if not days:
        raise ValueError("No report weekdays configured")

    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = tz.localize(now)
    else:
        now = now.astimezone(tz)

    hour, minute = parse_run_time(run_time)

    # At most one week ahead plus today
    for offset in range(8):
        day = (now + timedelta(days=offset)).date()
        if day.weekday() not in days:
            continue
        candidate = tz.localize(datetime(day.year, day.month, day.day, hour, minute))
        if candidate > now:
            return candidate

    raise ValueError("Could not find next run time")


def seconds_until(target: datetime, now: Optional[datetime] = None) -> float:
    """Seconds from now until target (never negative)."""
    if now is None:
        now = datetime.now(target.tzinfo)
    return max(0.0, (target - now).total_seconds())
