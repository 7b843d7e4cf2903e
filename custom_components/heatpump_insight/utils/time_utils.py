"""Time-related utility functions for Heat Pump Insight.

Calendar-day keys shared by every daily map. Energy and temperature maps must
be keyed by the same function or the degree-day join silently drops days.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional

from homeassistant.util import dt as dt_util


def parse_statistic_start(value: Any) -> Optional[datetime]:
    """Parse a statistic row start into an aware local datetime.

    Accepts ISO-8601 strings (websocket format), datetimes, and POSIX
    timestamps in seconds (recorder row format). Naive values are taken as
    local time.

    Returns:
        Local datetime, or None if the value cannot be interpreted
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = dt_util.utc_from_timestamp(float(value))
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = dt_util.parse_datetime(value)
        except ValueError:
            return None
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_util.get_default_time_zone())
    return dt_util.as_local(parsed)


def day_key(value: Any) -> Optional[str]:
    """Get the local calendar-day key (YYYY-MM-DD) for a statistic start."""
    parsed = parse_statistic_start(value)
    if parsed is None:
        return None
    return parsed.date().isoformat()


def today_key(now: Optional[datetime] = None) -> str:
    """Day key of the current (incomplete) day."""
    if now is None:
        now = dt_util.now()
    return dt_util.as_local(now).date().isoformat()


def yesterday_key(now: Optional[datetime] = None) -> str:
    """Day key of the last complete day."""
    if now is None:
        now = dt_util.now()
    return (dt_util.as_local(now).date() - timedelta(days=1)).isoformat()


def start_of_day(key: str) -> datetime:
    """Local midnight of a day key."""
    return dt_util.start_of_local_day(date.fromisoformat(key))
