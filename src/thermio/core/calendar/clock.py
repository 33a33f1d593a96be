"""Conversion of UTC instants into a workspace's local calendar.

Weekdays use the 0=Sunday..6=Saturday convention throughout, matching how
sign-off and export weekdays are stored in workspace settings.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from thermio.core.constants import DEFAULT_TIMEZONE


log = structlog.get_logger()


def utc_now() -> datetime:
    """Current aware UTC instant. Read once per request or job."""
    return datetime.now(UTC)


def sunday_weekday(d: date) -> int:
    """Weekday of ``d`` with 0=Sunday..6=Saturday."""
    return (d.weekday() + 1) % 7


def minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes elapsed from ``earlier`` to ``later`` (floored)."""
    return int((later - earlier).total_seconds() // 60)


def parse_instant(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are taken as UTC.
    """
    instant = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant


def _load_zone(name: str | None) -> ZoneInfo:
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            log.warning("invalid_timezone", timezone=name, fallback=DEFAULT_TIMEZONE)
    return ZoneInfo(DEFAULT_TIMEZONE)


@dataclass(frozen=True)
class TimeZoneClock:
    """Projects aware instants into one IANA zone.

    Build with :meth:`for_zone`; an unknown or empty zone name falls back to
    the default zone and is logged rather than raised.
    """

    zone: ZoneInfo

    @classmethod
    def for_zone(cls, name: str | None) -> "TimeZoneClock":
        return cls(zone=_load_zone(name))

    @property
    def name(self) -> str:
        return self.zone.key

    def local(self, at: datetime) -> datetime:
        return parse_instant(at).astimezone(self.zone)

    def today(self, at: datetime) -> date:
        return self.local(at).date()

    def weekday(self, at: datetime) -> int:
        return sunday_weekday(self.today(at))

    def hour(self, at: datetime) -> int:
        return self.local(at).hour

    def time_label(self, instant: datetime | str) -> str:
        """24-hour ``HH:MM`` label of ``instant`` in this zone."""
        return self.local(parse_instant(instant)).strftime("%H:%M")
