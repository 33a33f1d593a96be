"""Tenant-local time and week arithmetic.

Every date the compliance rules reason about is a calendar date in the
workspace's IANA zone, never the server's.
"""

from thermio.core.calendar.clock import (
    TimeZoneClock,
    minutes_between,
    parse_instant,
    sunday_weekday,
    utc_now,
)
from thermio.core.calendar.weeks import (
    is_sign_off_day,
    sign_off_date,
    week_days,
    week_start,
)


__all__ = [
    "TimeZoneClock",
    "is_sign_off_day",
    "minutes_between",
    "parse_instant",
    "sign_off_date",
    "sunday_weekday",
    "utc_now",
    "week_days",
    "week_start",
]
